import os

DYNAMODB_ENDPOINT_URL = os.getenv("DYNAMODB_ENDPOINT_URL", "http://dynamodb-local:8000")
AWS_DEFAULT_REGION = os.getenv("AWS_DEFAULT_REGION", "us-east-1")
AWS_ACCESS_KEY_ID = os.getenv("AWS_ACCESS_KEY_ID", "fake")
AWS_SECRET_ACCESS_KEY = os.getenv("AWS_SECRET_ACCESS_KEY", "fake")

EVENTS_TABLE_NAME = os.getenv("EVENTS_TABLE_NAME", "SyncUpEvents")

# Seconds a remote snapshot is ignored after a local edit
EDIT_SUPPRESSION_WINDOW = float(os.getenv("EDIT_SUPPRESSION_WINDOW", "1.5"))
# Seconds of quiet before local edits are written to the store
SAVE_DEBOUNCE = float(os.getenv("SAVE_DEBOUNCE", "0.5"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Size limits keeping one event inside a single DynamoDB item (400 KB)
MAX_EVENT_DAYS = int(os.getenv("MAX_EVENT_DAYS", "31"))
MAX_MESSAGES = int(os.getenv("MAX_MESSAGES", "200"))
MAX_DOCUMENT_BYTES = int(os.getenv("MAX_DOCUMENT_BYTES", "380000"))
