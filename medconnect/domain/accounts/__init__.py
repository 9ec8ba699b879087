"""Account domain - registration, login and own-profile management"""
