import os
import threading

class AclSettings:
    _instance = None
    _lock = threading.Lock()

    def __init__(self):
        self.ACL_DATABASE_URL = os.environ.get("ACL_DATABASE_URL", "sqlite:///acl.db")
        # Path to a YAML file with role hierarchy and permission settings
        self.ACL_CONFIG = os.environ.get("ACL_CONFIG", None)
        # Overrides the schema the acl_* tables are qualified with
        self.ACL_SCHEMA = os.environ.get("ACL_SCHEMA", None)
        # "threshold" or "bitwise"
        self.ACL_MASK_STRATEGY = os.environ.get("ACL_MASK_STRATEGY", None)

    def __new__(cls):
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super(AclSettings, cls).__new__(cls)
        return cls._instance

settings = AclSettings()
