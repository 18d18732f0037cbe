# core/config.py
"""
Configuration for Groov.
Scheduling constants, with environment overrides.
"""
import os

DEFAULT_TZ = os.getenv("GROOV_TZ", "America/Phoenix")
MODEL_NAME = os.getenv("GROOV_MODEL", "gemini-flash-lite-latest")

# Business hours used by the slot finder
BUSINESS_START_HOUR = int(os.getenv("GROOV_BUSINESS_START_HOUR", "9"))
BUSINESS_END_HOUR = int(os.getenv("GROOV_BUSINESS_END_HOUR", "17"))
MINUTES_INTERVAL = int(os.getenv("GROOV_MINUTES_INTERVAL", "15"))
MAX_DAYS_TO_CHECK = int(os.getenv("GROOV_MAX_DAYS_TO_CHECK", "14"))

# Lunch break (12:30 - 13:30)
LUNCH_START_HOUR = int(os.getenv("GROOV_LUNCH_START_HOUR", "12"))
LUNCH_START_MINUTE = int(os.getenv("GROOV_LUNCH_START_MINUTE", "30"))
LUNCH_END_HOUR = int(os.getenv("GROOV_LUNCH_END_HOUR", "13"))
LUNCH_END_MINUTE = int(os.getenv("GROOV_LUNCH_END_MINUTE", "30"))
LUNCH_MINUTES = (LUNCH_END_HOUR * 60 + LUNCH_END_MINUTE) - (LUNCH_START_HOUR * 60 + LUNCH_START_MINUTE)

# Duration estimation
DEFAULT_DURATION = 30
VALID_DURATIONS = [15, 30, 45, 60, 90, 120, 180, 240, 300, 360]
