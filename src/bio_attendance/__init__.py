"""Biometric attendance resolution package.

Organized by feature modules (scans, identity, shifts, attendance, uploads) with a thin
Flask controller layer over service/repository layers.
"""
