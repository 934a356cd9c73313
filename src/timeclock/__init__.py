"""Timeclock package.

Feature modules (attendance, schedules, hours, audit) follow a model / repository /
service layering with a thin Flask controller on top.
"""
