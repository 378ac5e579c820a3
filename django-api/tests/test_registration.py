"""Unit tests for RegistrationService and the refund coordinator.

Run with: pytest tests/test_registration.py -v
"""

import uuid
from decimal import Decimal

import pytest

from conftest import NOW
from events import models, wiring
from events.domain import EventDraft, PaymentStatus, Role
from events.domain.errors import (
    AlreadyRefundedError,
    CapacityExceededError,
    DuplicateRegistrationError,
    ErrorCode,
    EventNotFoundError,
    ForbiddenError,
    PaymentNotFoundError,
    PaymentRequiredError,
    RefundFailedError,
    RegistrationNotFoundError,
    ValidationError,
)


@pytest.fixture
def approved_event(make_event, event_service, admin):
    def _make(**kwargs):
        return event_service.approve_event(admin, str(make_event(**kwargs).id))

    return _make


def registered_ids(event):
    return set(models.Event.objects.get(pk=event.id.value).registered_users.values_list("id", flat=True))


def payment_for(actor):
    return models.Payment.objects.get(user_id=actor.user_id)


@pytest.mark.django_db
class TestFreeRegistration:
    def test_register_links_user_without_checkout(self, approved_event, registration_service, attendee, processor):
        event = approved_event()

        assert registration_service.register(attendee, str(event.id)) is None
        assert registered_ids(event) == {attendee.user_id}
        assert processor.checkouts == []

    def test_register_twice_is_duplicate(self, approved_event, registration_service, attendee):
        event = approved_event()
        registration_service.register(attendee, str(event.id))

        with pytest.raises(DuplicateRegistrationError):
            registration_service.register(attendee, str(event.id))

    def test_full_event_rejects_registration(self, approved_event, registration_service, make_actor):
        event = approved_event(capacity=1)
        registration_service.register(make_actor(Role.USER), str(event.id))

        with pytest.raises(CapacityExceededError):
            registration_service.register(make_actor(Role.USER), str(event.id))
        assert len(registered_ids(event)) == 1

    def test_pending_event_is_closed(self, make_event, registration_service, attendee):
        with pytest.raises(ValidationError) as exc:
            registration_service.register(attendee, str(make_event().id))
        assert exc.value.code is ErrorCode.EVENT_NOT_APPROVED

    def test_started_event_is_closed(self, approved_event, registration_service, attendee, clock):
        event = approved_event()
        clock.current = NOW.replace(hour=10)

        with pytest.raises(ValidationError) as exc:
            registration_service.register(attendee, str(event.id))
        assert exc.value.code is ErrorCode.REGISTRATION_CLOSED

    def test_hosts_cannot_register(self, approved_event, registration_service, host):
        with pytest.raises(ForbiddenError):
            registration_service.register(host, str(approved_event().id))

    def test_unknown_event(self, registration_service, attendee):
        with pytest.raises(EventNotFoundError):
            registration_service.register(attendee, str(uuid.uuid4()))

    def test_unregister_removes_link(self, approved_event, registration_service, attendee):
        event = approved_event()
        registration_service.register(attendee, str(event.id))

        registration_service.unregister(attendee, str(event.id))

        assert registered_ids(event) == set()

    def test_unregister_without_registration(self, approved_event, registration_service, attendee):
        with pytest.raises(RegistrationNotFoundError):
            registration_service.unregister(attendee, str(approved_event().id))

    def test_unregister_allowed_until_event_ends(self, approved_event, registration_service, attendee, clock):
        event = approved_event()
        registration_service.register(attendee, str(event.id))

        clock.current = NOW.replace(hour=10, minute=30)
        registration_service.unregister(attendee, str(event.id))

        assert registered_ids(event) == set()

    def test_unregister_after_event_ended_is_closed(self, approved_event, registration_service, attendee, clock):
        event = approved_event()
        registration_service.register(attendee, str(event.id))
        clock.current = NOW.replace(hour=11)

        with pytest.raises(ValidationError) as exc:
            registration_service.unregister(attendee, str(event.id))
        assert exc.value.code is ErrorCode.REGISTRATION_CLOSED


@pytest.mark.django_db
class TestPaidRegistration:
    def test_register_opens_checkout_and_pending_payment(
        self, approved_event, registration_service, attendee, processor
    ):
        event = approved_event(price="20.00")

        checkout = registration_service.register(attendee, str(event.id))

        assert checkout.session_id == "cs_test_1"
        assert processor.checkouts == [
            (2000, "Tech talk", {"event_id": str(event.id), "user_id": str(attendee.user_id)})
        ]
        payment = payment_for(attendee)
        assert payment.status == models.Payment.Status.PENDING
        assert payment.checkout_session_id == "cs_test_1"
        assert registered_ids(event) == set()

    def test_second_checkout_reuses_pending_payment(self, approved_event, registration_service, attendee):
        event = approved_event(price="20.00")
        registration_service.register(attendee, str(event.id))

        checkout = registration_service.register(attendee, str(event.id))

        assert models.Payment.objects.filter(user_id=attendee.user_id).count() == 1
        assert payment_for(attendee).checkout_session_id == checkout.session_id == "cs_test_2"

    def test_processor_failure_is_payment_required(self, approved_event, registration_service, attendee, processor):
        event = approved_event(price="20.00")
        processor.fail_checkout = True

        with pytest.raises(PaymentRequiredError):
            registration_service.register(attendee, str(event.id))
        assert not models.Payment.objects.exists()

    def test_confirm_completes_payment_and_links_user(self, approved_event, registration_service, attendee):
        event = approved_event(price="20.00")
        registration_service.register(attendee, str(event.id))

        payment = registration_service.confirm_registration(attendee, str(event.id), "pi_123")

        assert payment.status is PaymentStatus.COMPLETED
        assert payment.payment_reference == "pi_123"
        assert registered_ids(event) == {attendee.user_id}

    def test_confirm_without_checkout(self, approved_event, registration_service, attendee):
        event = approved_event(price="20.00")

        with pytest.raises(PaymentNotFoundError):
            registration_service.confirm_registration(attendee, str(event.id), "pi_123")

    def test_confirm_requires_reference(self, approved_event, registration_service, attendee):
        event = approved_event(price="20.00")
        registration_service.register(attendee, str(event.id))

        with pytest.raises(ValidationError):
            registration_service.confirm_registration(attendee, str(event.id), "")

    def test_confirm_twice_is_duplicate(self, approved_event, registration_service, attendee):
        event = approved_event(price="20.00")
        registration_service.register(attendee, str(event.id))
        registration_service.confirm_registration(attendee, str(event.id), "pi_123")

        with pytest.raises(DuplicateRegistrationError):
            registration_service.confirm_registration(attendee, str(event.id), "pi_123")

    def test_confirm_on_full_event_refunds(
        self, approved_event, registration_service, make_actor, processor
    ):
        event = approved_event(price="20.00", capacity=1)
        first, second = make_actor(Role.USER), make_actor(Role.USER)
        registration_service.register(first, str(event.id))
        registration_service.register(second, str(event.id))
        registration_service.confirm_registration(first, str(event.id), "pi_first")

        with pytest.raises(CapacityExceededError):
            registration_service.confirm_registration(second, str(event.id), "pi_second")

        assert payment_for(second).status == models.Payment.Status.REFUNDED
        assert [ref for ref, _, _ in processor.refunds] == ["pi_second"]
        assert registered_ids(event) == {first.user_id}

    def test_failed_refund_on_full_event_leaves_payment_retryable(
        self, approved_event, registration_service, make_actor, processor
    ):
        event = approved_event(price="20.00", capacity=1)
        first, second = make_actor(Role.USER), make_actor(Role.USER)
        registration_service.register(first, str(event.id))
        registration_service.register(second, str(event.id))
        registration_service.confirm_registration(first, str(event.id), "pi_first")
        processor.fail_refunds = True

        with pytest.raises(RefundFailedError):
            registration_service.confirm_registration(second, str(event.id), "pi_second")
        assert payment_for(second).status == models.Payment.Status.PENDING

        processor.fail_refunds = False
        with pytest.raises(CapacityExceededError):
            registration_service.confirm_registration(second, str(event.id), "pi_second")

        assert payment_for(second).status == models.Payment.Status.REFUNDED
        assert [ref for ref, _, _ in processor.refunds] == ["pi_second"]
        assert registered_ids(event) == {first.user_id}


@pytest.mark.django_db
class TestPaidUnregister:
    @pytest.fixture
    def confirmed(self, approved_event, registration_service, attendee):
        event = approved_event(price="20.00")
        registration_service.register(attendee, str(event.id))
        registration_service.confirm_registration(attendee, str(event.id), "pi_123")
        return event

    def test_unregister_refunds_then_unlinks(self, confirmed, registration_service, attendee, processor):
        registration_service.unregister(attendee, str(confirmed.id))

        payment = payment_for(attendee)
        assert processor.refunds == [("pi_123", 2000, f"refund-{payment.id}")]
        assert payment.status == models.Payment.Status.REFUNDED
        assert registered_ids(confirmed) == set()

    def test_refund_failure_leaves_registration_intact(self, confirmed, registration_service, attendee, processor):
        processor.fail_refunds = True

        with pytest.raises(RefundFailedError):
            registration_service.unregister(attendee, str(confirmed.id))

        assert payment_for(attendee).status == models.Payment.Status.COMPLETED
        assert registered_ids(confirmed) == {attendee.user_id}

    def test_user_may_register_again_after_refund(self, confirmed, registration_service, attendee):
        registration_service.unregister(attendee, str(confirmed.id))

        checkout = registration_service.register(attendee, str(confirmed.id))

        assert checkout is not None
        assert models.Payment.objects.filter(user_id=attendee.user_id).count() == 2

    def test_refund_still_happens_after_price_drops_to_zero(
        self, confirmed, event_service, registration_service, admin, attendee, processor
    ):
        event_service.update_event(
            admin,
            str(confirmed.id),
            EventDraft(
                title=confirmed.title,
                description=confirmed.description,
                capacity=confirmed.capacity.value,
                price=Decimal("0"),
                start_date=confirmed.window.start,
                end_date=confirmed.window.end,
            ),
        )

        registration_service.unregister(attendee, str(confirmed.id))

        assert [ref for ref, _, _ in processor.refunds] == ["pi_123"]
        assert payment_for(attendee).status == models.Payment.Status.REFUNDED
        assert registered_ids(confirmed) == set()

    def test_missing_completed_payment(self, confirmed, registration_service, attendee):
        models.Payment.objects.filter(user_id=attendee.user_id).update(status=models.Payment.Status.PENDING)

        with pytest.raises(PaymentNotFoundError):
            registration_service.unregister(attendee, str(confirmed.id))


@pytest.mark.django_db
class TestRefundCoordinator:
    @pytest.fixture
    def refunds(self, processor):
        return wiring._refunds(processor)

    @pytest.fixture
    def completed_payment(self, approved_event, registration_service, attendee):
        event = approved_event(price="20.00")
        registration_service.register(attendee, str(event.id))
        return registration_service.confirm_registration(attendee, str(event.id), "pi_123")

    def test_refund_is_idempotent_per_payment(self, refunds, completed_payment, processor):
        refunded = refunds.refund(completed_payment)

        with pytest.raises(AlreadyRefundedError):
            refunds.refund(completed_payment)
        assert len(processor.refunds) == 1
        assert refunded.status is PaymentStatus.REFUNDED

    def test_pending_payment_cannot_be_refunded(self, refunds, approved_event, registration_service, attendee):
        event = approved_event(price="20.00")
        registration_service.register(attendee, str(event.id))
        pending = wiring.DjangoPaymentStore().find_open_payment(attendee.user_id, event.id)

        with pytest.raises(ValidationError) as exc:
            refunds.refund(pending)
        assert exc.value.code is ErrorCode.PAYMENT_NOT_COMPLETED

    def test_payment_without_reference_fails(self, refunds, completed_payment):
        models.Payment.objects.filter(pk=completed_payment.id.value).update(payment_reference=None)

        with pytest.raises(RefundFailedError):
            refunds.refund(completed_payment)

    def test_callback_failure_rolls_back_refund_record(self, refunds, completed_payment):
        def explode(_):
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError):
            refunds.refund(completed_payment, on_refunded=explode)

        assert models.Payment.objects.get(pk=completed_payment.id.value).status == models.Payment.Status.COMPLETED
