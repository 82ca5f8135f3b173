from pathlib import Path


# Base directory
BASE_DIR = Path(__file__).resolve().parent.parent.parent.parent

# Log directory
LOG_DIR = BASE_DIR / 'logs'

# Evidence photos written by the local media store
MEDIA_DIR = BASE_DIR / 'media'

# Device-local durable store (offline queue + cached snapshots)
LOCAL_STATE_DIR = BASE_DIR / 'local_state'
