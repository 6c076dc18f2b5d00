"""
Maintenance Scripts

    - seed_data.py: Creates the default units and admin accounts

Usage:
    python -m scripts.seed_data
"""
