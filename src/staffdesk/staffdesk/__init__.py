"""StaffDesk package.

Organized by feature modules (users, profiles, tasks, worklogs, attendance,
analytics) with a thin Flask controller layer over service/repository layers.
"""
