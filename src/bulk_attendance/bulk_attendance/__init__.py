"""Bulk Attendance package.

Excel attendance import with a review/approval workflow. Organised by feature
modules (ingest, employees, calendar, leaves, attendance, reconciliation) with
a thin Flask controller layer over service/repository layers.
"""
