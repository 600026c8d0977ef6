class ArchboxError(Exception):
    pass


class ArchboxSettingsError(ArchboxError):
    def __init__(self, msg, error=None):
        super().__init__(f"Invalid settings: {msg}")
        self.error = error


class ArchboxFilePathError(ArchboxError):
    def __init__(self, filepath, msg=""):
        super().__init__(msg)
        self.filepath = filepath


class ArchboxPrivateKeyError(ArchboxError):
    pass


class ArchboxEmptyPrivateKeysError(ArchboxPrivateKeyError):
    def __init__(self):
        super().__init__(
            "Check your configuration file, you have no private key(s) specified."
        )


class ArchboxPrivateKeyNotFoundError(ArchboxPrivateKeyError):
    def __init__(self, filepath):
        super().__init__(
            "Check your configuration file, "
            "the path to your private key does not exist."
        )
        self.filepath = filepath


class ArchboxBackupError(ArchboxError):
    def __init__(self, kind):
        super().__init__(f"No backup strategy for {kind}")
        self.kind = kind
