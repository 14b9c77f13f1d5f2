import time
import json
import os
import config


class TransactionLog:
    """Per-ballot record of committed and rejected operations."""

    def __init__(self, log_file=None):
        self.log_file = log_file or config.Config.TX_LOG
        self.logs = self._load_logs()

    def _load_logs(self):
        if os.path.exists(self.log_file):
            with open(self.log_file, "r") as f:
                return json.load(f)
        return {}

    def _save_logs(self):
        with open(self.log_file, "w") as f:
            json.dump(self.logs, f, indent=2)

    def log_committed(self, ballot_id, operation, signer, **details):
        self._append(ballot_id, {
            "time": time.time(),
            "operation": operation,
            "signer": signer,
            "status": "committed",
            **details
        })

    def log_rejected(self, ballot_id, operation, signer, error):
        self._append(ballot_id, {
            "time": time.time(),
            "operation": operation,
            "signer": signer,
            "status": "rejected",
            "error": error
        })

    def _append(self, ballot_id, event):
        if ballot_id is None:
            return
        self.logs.setdefault(ballot_id, []).append(event)
        self._save_logs()

    def get_log(self, ballot_id):
        return self.logs.get(ballot_id)
