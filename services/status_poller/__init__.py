from .poller import PaymentStatusPoller, PollOutcome, PollResult

__all__ = ["PaymentStatusPoller", "PollOutcome", "PollResult"]
