from config.loader import get_config_loader

# Get the config loader instance
config = get_config_loader()

# Logging
LOG_LEVEL = config.get("LOG_LEVEL", "warning")
DEBUG_LOG_FILE = config.get("DEBUG_LOG_FILE", "sheets_cli_debug.log")

# Credential and token storage
# GF_SHEET_CREDENTIALS points at the OAuth client JSON downloaded from Google Cloud Console
CREDENTIALS_FILE = config.get_path("GF_SHEET_CREDENTIALS", "~/.sheets-cli/credentials.json")
TOKEN_FILE = config.get_path("GF_SHEET_TOKEN", "~/.sheets-cli/token.json")

# OAuth configuration (hardcoded - the redirect URI registered for the client uses this port)
OAUTH_CALLBACK_PORT = 3847
SCOPES = [
    "https://www.googleapis.com/auth/spreadsheets",
    "https://www.googleapis.com/auth/drive.readonly",
]
GOOGLE_AUTH_URI = "https://accounts.google.com/o/oauth2/auth"
GOOGLE_TOKEN_URI = "https://oauth2.googleapis.com/token"

# Timeouts
# Wall-clock limit for the browser round trip, in seconds
AUTH_TIMEOUT = config.get("AUTH_TIMEOUT", 300)
# Token endpoint request timeout, in seconds
TOKEN_EXCHANGE_TIMEOUT = config.get("TOKEN_EXCHANGE_TIMEOUT", 30.0)

# Sheets defaults
LIST_LIMIT = config.get("LIST_LIMIT", 20)
