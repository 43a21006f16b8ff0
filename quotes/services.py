import logging
from django.db import transaction
from django.utils import timezone
from rest_framework import status

from core.audit import log_audit, log_request_audit
from core.exceptions import ServiceError
from core.models import AuditAction
from .models import Quote, QuoteStatus
from .pricing import quote_estimator, get_estimated_delivery_days

logger = logging.getLogger(__name__)


class QuoteAlreadyHandledError(ServiceError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = 'Quote has already been handled'


def _audit(action, quote, user=None, request=None, **kwargs):
    if request is not None:
        return log_request_audit(request, action, 'Quote', entity_id=quote.pk, **kwargs)
    return log_audit(action, 'Quote', entity_id=quote.pk, user=user, **kwargs)


class QuoteService:
    """Quote requests: submission with an automatic estimate, then admin handling."""

    @staticmethod
    def create_quote(data, request=None):
        """
        Store a PENDING quote priced by the estimator.

        Returns (quote, estimated_delivery) where estimated_delivery is the
        {min, max} delivery window in days.
        """
        estimate = quote_estimator.calculate_estimate(
            data['package_weight'],
            (data['package_length'], data['package_width'], data['package_height']),
            data['service_type'],
            value=data.get('package_value'),
        )

        quote = Quote.objects.create(
            estimated_price=estimate.total_estimate,
            status=QuoteStatus.PENDING,
            **data
        )

        _audit(
            AuditAction.QUOTE_CREATED, quote, request=request,
            new_data={
                'email': quote.email,
                'service_type': quote.service_type,
                'estimated_price': str(estimate.total_estimate),
            },
        )
        logger.info(f"[QUOTE] New request {quote.pk} from {quote.email}: {estimate.total_estimate}")
        return quote, get_estimated_delivery_days(quote.service_type)

    @staticmethod
    @transaction.atomic
    def respond(quote, estimated_price, admin_response, user, request=None):
        """Answer a PENDING quote and email the customer after commit."""
        if quote.status != QuoteStatus.PENDING:
            raise QuoteAlreadyHandledError(f"Quote has already been {quote.status.lower()}")

        previous = {'status': quote.status, 'estimated_price': str(quote.estimated_price)}

        quote.estimated_price = estimated_price
        quote.admin_response = admin_response
        quote.status = QuoteStatus.RESPONDED
        quote.responded_by = user
        quote.responded_at = timezone.now()
        quote.save()

        from communications.tasks import send_quote_response_email_task

        quote_id = str(quote.pk)
        user_id = str(user.pk) if user is not None else None
        transaction.on_commit(lambda: send_quote_response_email_task.delay(quote_id, user_id))

        _audit(
            AuditAction.QUOTE_RESPONDED, quote, user=user, request=request,
            previous_data=previous,
            new_data={'status': quote.status, 'estimated_price': str(estimated_price)},
        )
        logger.info(f"[QUOTE] Responded to {quote.pk} at {estimated_price}")
        return quote

    @staticmethod
    def convert(quote, user=None, request=None):
        """Mark a PENDING or RESPONDED quote as CONVERTED."""
        if quote.status == QuoteStatus.CONVERTED:
            raise QuoteAlreadyHandledError(f"Quote has already been {quote.status.lower()}")

        previous_status = quote.status
        quote.status = QuoteStatus.CONVERTED
        quote.save(update_fields=['status', 'updated_at'])

        _audit(
            AuditAction.QUOTE_CONVERTED, quote, user=user, request=request,
            previous_data={'status': previous_status},
            new_data={'status': quote.status},
        )
        logger.info(f"[QUOTE] Converted {quote.pk}")
        return quote

    @staticmethod
    def delete_quote(quote):
        quote_id = quote.pk
        quote.delete()
        logger.info(f"[QUOTE] Deleted {quote_id}")
