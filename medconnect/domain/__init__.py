"""Domain packages: accounts, doctors, appointments"""
