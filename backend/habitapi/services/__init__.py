# Services package init
"""
Habit Tracker Backend — Services Layer
========================================

What:  Business rules between routes (HTTP) and the managed backend.
How:   Services are stateless; each call receives the backend handle to use,
       so tests pass a mock and the app passes the one built at startup.

Service Inventory:
    - SupabaseBackend: Auth and table calls against Supabase (the only SDK user)
    - GoogleOAuthClient: Consent URL and authorization-code exchange
    - AuthService: Logout, token refresh, password login
    - HabitLogService: Owner-scoped habit log deletion
    - ProfileService: Idempotent profile creation after signup
    - CalendarConnectService: Google Calendar OAuth callback flow
    - GoogleCalendarClient: Event insert/list/delete on the user's primary calendar
    - ReminderService: Recurring habit reminders, linked in habit_calendar_events
"""
