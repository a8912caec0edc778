# =============================================================================
# TESTES - Notifications
# =============================================================================


class TestNotificationInbox:
    """Testes para filas de notificacao por usuario."""

    def test_drain_returns_and_clears(self):
        from eduquiz.models.enums import NotificationKind
        from eduquiz.notifications import NotificationInbox

        inbox = NotificationInbox()
        inbox.push("u1", NotificationKind.SUCCESS, "Quiz saved as draft!")
        inbox.push("u2", NotificationKind.ERROR, "Failed to load quiz")

        drained = inbox.drain("u1")

        assert [n.message for n in drained] == ["Quiz saved as draft!"]
        assert inbox.drain("u1") == []
        assert len(inbox.drain("u2")) == 1

    def test_keeps_latest_only(self):
        from eduquiz.models.enums import NotificationKind
        from eduquiz.notifications import NotificationInbox

        inbox = NotificationInbox(max_per_user=2)
        for n in range(3):
            inbox.push("u1", NotificationKind.SUCCESS, f"m{n}")

        assert [n.message for n in inbox.drain("u1")] == ["m1", "m2"]

    def test_user_notifier_logs_and_queues(self, capture_logs):
        from eduquiz.models.enums import NotificationKind
        from eduquiz.notifications import NotificationInbox

        inbox = NotificationInbox()

        inbox.for_user("u1").notify(NotificationKind.ERROR, "Failed to submit quiz")

        assert inbox.drain("u1")[0].kind is NotificationKind.ERROR
        assert "Failed to submit quiz" in capture_logs.text
