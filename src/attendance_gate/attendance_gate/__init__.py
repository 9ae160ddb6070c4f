"""Attendance Gate package.

Feature modules (forms, geofence, submissions) hold pure decision logic;
services and MySQL repositories wrap them, and a thin Flask controller layer
exposes them over HTTP.
"""
