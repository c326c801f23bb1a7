"""
Services package for the change notifier.

Contains the two stages of an invocation: filtering the inbound event and
dispatching the notification email.
"""

from change_notifier.services.dispatcher import dispatch
from change_notifier.services.event_filter import evaluate

__all__ = ["dispatch", "evaluate"]
