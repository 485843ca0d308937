"""Constants shared across the version check modules."""

from __future__ import annotations

STORE_LOOKUP_BY_ID_URL = "https://itunes.apple.com/{country}/lookup?id={identifier}"
STORE_LOOKUP_BY_BUNDLE_ID_URL = "https://itunes.apple.com/{country}/lookup?bundleId={identifier}"
DEFAULT_STORE_COUNTRY = "US"

STORE_RESULTS_KEY = "results"
STORE_VERSION_KEY = "version"
STORE_URL_KEY = "trackViewUrl"
STORE_RELEASE_NOTES_KEY = "releaseNotes"

REQUIREMENT_VERSION_KEY = "version"
REQUIREMENT_OPTIONAL_KEY = "optional"

FIRST_LAUNCH_KEY_PREFIX = "did_finish_first_launch."

LOCAL_METADATA_ENV = "VERSION_CHECK_LOCAL_METADATA_DIR"
LOCAL_METADATA_FILENAME = "metadata.json"

REQUEST_TIMEOUT_SECONDS = 10.0

FLOW_RELEASE_NOTES = "release_notes"
FLOW_REQUIRED_VERSION = "required_version"

STRING_TITLE = "version_check.title"
STRING_BODY = "version_check.body"
STRING_BUTTON_LATER = "version_check.button.later"
STRING_BUTTON_UPDATE = "version_check.button.update"
STRING_BUTTON_OK = "version_check.button.ok"
