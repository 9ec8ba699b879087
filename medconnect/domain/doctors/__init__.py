"""Doctor directory domain - profiles, weekly availability and open slots"""
