"""User messages for Peka."""

# Validation messages
ERROR_VAULT_NAME_REQUIRED = "Vault name is required"
ERROR_FOLDER_NAME_REQUIRED = "Folder name is required."
ERROR_FOLDER_PIN_SHAPE = "PIN must be exactly 4 digits."
ERROR_CREDENTIAL_FIELDS = "All fields are required."
ERROR_MASTER_PASSWORD_REQUIRED = "Please enter your master password."
ERROR_IMPORT_PASSWORD_REQUIRED = "Master password is required"
ERROR_IMPORT_FILE_REQUIRED = "Please select a vault file"
ERROR_DESTINATION_REQUIRED = "Destination path is required"

# Master password policy
POLICY_EMPTY = "Password cannot be empty"
POLICY_LENGTH = "Password must be at least {length} characters long"
POLICY_MIXED_CASE = "Password must include both uppercase and lowercase letters"
POLICY_DIGIT = "Password must include at least one digit (0-9)"
POLICY_SYMBOL = "Password must include at least one special character"
POLICY_MISMATCH = "Passwords do not match"
POLICY_WEAK = "Password is too weak. Please use a stronger password"

# PIN challenge
PIN_SHAPE = "PIN must be 4 digits"
PIN_INCORRECT = "Incorrect PIN. Please try again."
PIN_VERIFY_FAILED = "Failed to verify PIN. Please try again."

# Startup
DISCOVERY_FAILED = "Unable to check existing vaults."

# Fallbacks when the backend gives no message
FALLBACK_CREATE_FOLDER = "Unable to create folder. Please try again."
FALLBACK_DELETE_FOLDER = "Unable to delete folder."
FALLBACK_ADD_CREDENTIAL = "Unable to save credential."
FALLBACK_DELETE_CREDENTIAL = "Unable to delete credential."
FALLBACK_EXPORT = "Unable to export vault."
FALLBACK_UNLOCK = "Failed to unlock vault"
FALLBACK_DELETE_VAULT = "Failed to delete vault"
FALLBACK_GENERIC = "Unknown error"

# Success
SUCCESS_EXPORTED = "Vault exported successfully."
SUCCESS_IMPORTED = "Vault imported from '{source}'"
SUCCESS_DELETED_VAULT = "Deleted vault '{name}'"

# Info
INFO_NO_VAULTS = "No vaults found on this device."
INFO_PREPARING = "Preparing your vault..."
INFO_NO_FOLDERS = "No folders yet. Press 'n' to create one."
INFO_NO_CREDENTIALS = "No credentials yet. Press 'a' to add one."
