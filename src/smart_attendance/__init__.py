"""Smart Attendance package.

Organized by feature modules (users, join_requests, attendance, ...) with a
thin Flask controller layer over service/repository layers.
"""
