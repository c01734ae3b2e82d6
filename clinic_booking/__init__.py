"""
Clinic booking chat.

A turn-based text dialogue that lets patients list, book, edit and
cancel medical appointments without double-booking any doctor.
"""
