# Routes package init
"""
Habit Tracker Backend — API Routes Package
============================================

Route Inventory:
    - auth.py:        POST /api/auth/logout, /api/auth/refresh, /api/auth/login
    - google.py:      GET  /api/auth/google, /api/auth/google/callback
    - calendar.py:    POST, GET /api/calendar/reminders
    - habit_logs.py:  DELETE /api/habit-logs/{id}
    - users.py:       POST /api/users/create-profile
    - health.py:      GET  /health

Design Principle:
    Routes are THIN — they extract input, call a service, and wrap the result
    in the envelope. Failures are raised, never returned, and rendered by the
    global exception handlers in main.py.
"""
