"""Push notifications and the client-side views that consume them."""

from .auth_guard import AuthContinuityGuard, AuthState
from .hub import (
    ChangeNotification,
    NotificationHub,
    Subscription,
    account_scope,
    get_hub,
    install_commit_hooks,
    job_scope,
    publish_after_commit,
    staff_scope,
)
from .reconciler import AccountViewReconciler, JobView, JobViewReconciler

__all__ = [
    "AccountViewReconciler",
    "AuthContinuityGuard",
    "AuthState",
    "ChangeNotification",
    "JobView",
    "JobViewReconciler",
    "NotificationHub",
    "Subscription",
    "account_scope",
    "get_hub",
    "install_commit_hooks",
    "job_scope",
    "publish_after_commit",
    "staff_scope",
]
