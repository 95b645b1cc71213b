"""JSON state file tracking what a previous deploy created."""

import json
import logging
import os

logger = logging.getLogger(__name__)

STATE_FILE = "website_deploy.json"


class StateStore:
    def __init__(self, path: str):
        self.path = os.path.abspath(path)

    @classmethod
    def for_project(cls, project_dir: str) -> "StateStore":
        return cls(os.path.join(project_dir, STATE_FILE))

    def load(self) -> dict:
        if os.path.exists(self.path):
            with open(self.path) as f:
                return json.load(f)
        return {}

    def save(self, state: dict):
        with open(self.path, "w") as f:
            json.dump(state, f, indent=2)
        logger.debug(f"State saved to {self.path}")

    def clear(self):
        """Persist an empty state, keeping the file so the location stays discoverable."""
        self.save({})
