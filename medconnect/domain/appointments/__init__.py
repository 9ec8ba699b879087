"""Appointment ledger domain - bookings, status transitions and payment flag"""
