class CloudSyncError(Exception):
    """Base class for failures raised by the sync layer."""


class BackendUnavailableError(CloudSyncError):
    """Supabase credentials were not configured, so there is no remote to talk to."""

    def __init__(self, message: str = "Supabase client not initialized."):
        super().__init__(message)


class VaultAccessError(CloudSyncError):
    """The vault row could not be read or provisioned."""

    def __init__(self, message: str, user_id: str | None = None):
        super().__init__(message)
        self.message = message
        self.user_id = user_id
