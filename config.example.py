# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
Do NOT commit real credentials or tokens. Put them in .env (local, gitignored).

This file exists to make the repo self-documenting even without opening .env.
"""

ENV_VARS = {
    # App / logging
    "TASKDESK_APP_NAME": "App display name (default: taskdesk).",
    "TASKDESK_LOG_LEVEL": "Console logging level (default: INFO).",
    # Task service
    "TASKDESK_API_BASE_URL": "Task service base URL (default: http://localhost:8080/api/v1).",
    "TASKDESK_API_TOKEN": "Optional pre-issued bearer token; the session is read from its claims.",
    "TASKDESK_USERNAME": "Username for automatic login at startup.",
    "TASKDESK_PASSWORD": "Password for automatic login at startup.",
    "TASKDESK_AUTO_LOGIN": "Log in at startup (default: true when username and password are set).",
    # HTTP
    "TASKDESK_HTTP_TIMEOUT_SECONDS": "Total request timeout (default: 15).",
    "TASKDESK_HTTP_CONNECT_TIMEOUT_SECONDS": "Connect timeout (default: 5).",
    # Paths (gitignored)
    "TASKDESK_DATA_DIR": "Local data directory for logs (default: .local/taskdesk).",
}
