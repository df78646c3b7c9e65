"""Attendance Ledger package.

Organized by feature modules (people, subjects, ledger, reports, navigation,
meetings) with async service/repository layers and a thin Flask JSON layer.
"""
