"""Fake push adapter — records pushes in memory for test assertions."""

from uuid import uuid4

from notifications.channel.push_port import PushPort


class FakePushAdapter(PushPort):
    def __init__(self):
        self.sent_pushes: list[dict] = []
        self.should_succeed = True
        self.failure_reason = "Push delivery failed"
        self.invalid_tokens: set[str] = set()

    def configure(
        self,
        should_succeed: bool = True,
        failure_reason: str = "Push delivery failed",
        invalid_tokens: set[str] | None = None,
    ):
        """Make every push fail, or only pushes to the given tokens."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason
        self.invalid_tokens = set(invalid_tokens or ())

    def send(
        self,
        device_token: str,
        title: str,
        body: str,
        data: dict | None = None,
    ) -> dict:
        if not self.should_succeed:
            return {"message_id": None, "status": "failed", "error": self.failure_reason}
        if device_token in self.invalid_tokens:
            return {"message_id": None, "status": "failed", "error": "DeviceNotRegistered"}

        message_id = f"push-{uuid4().hex[:12]}"
        self.sent_pushes.append(
            {
                "message_id": message_id,
                "device_token": device_token,
                "title": title,
                "body": body,
                "data": data,
            }
        )
        return {"message_id": message_id, "status": "sent"}

    def pushes_to(self, device_token: str) -> list[dict]:
        return [p for p in self.sent_pushes if p["device_token"] == device_token]

    def reset(self):
        self.sent_pushes.clear()
        self.should_succeed = True
        self.failure_reason = "Push delivery failed"
        self.invalid_tokens = set()
