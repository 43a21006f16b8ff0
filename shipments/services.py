import logging
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction
from django.forms.models import model_to_dict
from rest_framework import status

from core.audit import log_audit, log_request_audit
from core.exceptions import ServiceError
from core.models import AuditAction
from quotes.pricing import calculate_estimated_delivery_date
from .constants import ShipmentStatus, ServiceType, STATUS_DESCRIPTIONS, humanize_status
from .models import Shipment, FreightCharges, PackageImage, TrackingEvent, MAX_PACKAGE_IMAGES
from .utils import generate_tracking_code, MAX_TRACKING_CODE_ATTEMPTS

logger = logging.getLogger(__name__)


class TrackingCodeGenerationError(ServiceError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = 'Failed to generate unique tracking code. Please try again.'


class EventNotFoundError(ServiceError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = 'Event not found in this shipment'


class ImageLimitError(ServiceError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = f'Maximum {MAX_PACKAGE_IMAGES} package images allowed'


class DuplicateCarrierCodeError(ServiceError):
    status_code = status.HTTP_409_CONFLICT
    default_message = 'A carrier with this code already exists'


def snapshot(shipment):
    """JSON-friendly copy of a shipment for the audit trail."""
    data = model_to_dict(shipment)
    data['id'] = str(shipment.pk)
    data['tracking_code'] = shipment.tracking_code
    data['status'] = shipment.status
    return data


def _audit(action, shipment, user, request=None, entity_type='Shipment', entity_id=None, **kwargs):
    if entity_id is None:
        entity_id = shipment.pk
    if request is not None:
        return log_request_audit(request, action, entity_type, entity_id=entity_id, **kwargs)
    return log_audit(action, entity_type, entity_id=entity_id, user=user, **kwargs)


PAYMENT_FIELDS = ('is_paid', 'payment_method', 'payment_status', 'paid_at', 'payment_reference')


def payment_snapshot(freight):
    if freight is None:
        return None
    data = {field: getattr(freight, field) for field in PAYMENT_FIELDS}
    data['paid_at'] = freight.paid_at.isoformat() if freight.paid_at else None
    return data


def _audit_payment(shipment, user, request, previous, current):
    """PAYMENT_RECORDED when charges first become paid, PAYMENT_UPDATED on other payment edits."""
    if current is None or current == previous:
        return
    if current['is_paid'] and not (previous and previous['is_paid']):
        action = AuditAction.PAYMENT_RECORDED
    elif previous is not None:
        action = AuditAction.PAYMENT_UPDATED
    else:
        return
    _audit(
        action, shipment, user, request, entity_type='FreightCharges',
        previous_data=previous, new_data=current,
    )


def _queue(task_name, *args):
    """Queue a notification task once the current transaction commits."""
    from communications import tasks

    task = getattr(tasks, task_name)
    transaction.on_commit(lambda: task.delay(*args))


class ShipmentService:
    """
    Service for the shipment lifecycle: creation, edits, status changes and
    tracking history.
    """

    @staticmethod
    def generate_unique_tracking_code():
        """Draw tracking codes until an unused one is found."""
        for attempt in range(MAX_TRACKING_CODE_ATTEMPTS):
            code = generate_tracking_code()
            if not Shipment.objects.filter(tracking_code=code).exists():
                return code
            logger.warning(f"[SHIPMENT] Tracking code collision on {code} (attempt {attempt + 1})")
        raise TrackingCodeGenerationError()

    @staticmethod
    @transaction.atomic
    def create_shipment(data, user, request=None):
        """
        Create a shipment with its freight charges, images and the initial
        CREATED tracking event at the origin.

        The receiver is emailed after commit unless send_notification is False.
        """
        data = dict(data)
        send_notification = data.pop('send_notification', True)
        images = data.pop('package_images', None) or []
        freight = data.pop('freight_charges', None)

        tracking_code = ShipmentService.generate_unique_tracking_code()

        if not data.get('estimated_delivery_date'):
            data['estimated_delivery_date'] = calculate_estimated_delivery_date(
                data.get('service_type') or ServiceType.STANDARD
            )

        shipment = Shipment.objects.create(
            tracking_code=tracking_code,
            status=ShipmentStatus.CREATED,
            current_location=data['origin'],
            created_by=user,
            **data
        )

        PackageImage.objects.bulk_create([
            PackageImage(shipment=shipment, url=image['url'], public_id=image['public_id'])
            for image in images[:MAX_PACKAGE_IMAGES]
        ])

        if freight:
            charges = FreightCharges.objects.create(shipment=shipment, **freight)
            _audit_payment(shipment, user, request, None, payment_snapshot(charges))

        TrackingEvent.objects.create(
            shipment=shipment,
            status=ShipmentStatus.CREATED,
            location=shipment.origin,
            description=STATUS_DESCRIPTIONS[ShipmentStatus.CREATED],
        )

        if send_notification:
            _queue('send_shipment_created_email_task', str(shipment.pk), _user_id(user))

        _audit(AuditAction.SHIPMENT_CREATED, shipment, user, request, new_data=snapshot(shipment))
        logger.info(f"[SHIPMENT] Created {shipment.tracking_code} ({shipment.origin} -> {shipment.destination})")
        return shipment

    @staticmethod
    @transaction.atomic
    def update_shipment(shipment, data, user, request=None):
        """
        Apply an edit. Groups present in data replace the stored values;
        package_images and freight_charges are replaced as a whole
        (freight_charges=None removes the charges).
        """
        data = dict(data)
        previous = snapshot(shipment)

        images = data.pop('package_images', None)
        has_freight = 'freight_charges' in data
        freight = data.pop('freight_charges', None)

        for field, value in data.items():
            setattr(shipment, field, value)
        shipment.save()

        if images is not None:
            shipment.package_images.all().delete()
            PackageImage.objects.bulk_create([
                PackageImage(shipment=shipment, url=image['url'], public_id=image['public_id'])
                for image in images[:MAX_PACKAGE_IMAGES]
            ])

        if has_freight:
            previous_payment = payment_snapshot(FreightCharges.objects.filter(shipment=shipment).first())
            # Fields left out fall back to their defaults
            FreightCharges.objects.filter(shipment=shipment).delete()
            if freight is not None:
                charges = FreightCharges.objects.create(shipment=shipment, **freight)
                _audit_payment(shipment, user, request, previous_payment, payment_snapshot(charges))
            # Drop the cached reverse one-to-one
            relation = Shipment.freight_charges.related
            if relation.is_cached(shipment):
                relation.delete_cached_value(shipment)

        _audit(
            AuditAction.SHIPMENT_UPDATED, shipment, user, request,
            previous_data=previous, new_data=snapshot(shipment),
        )
        logger.info(f"[SHIPMENT] Updated {shipment.tracking_code}")
        return shipment

    @staticmethod
    @transaction.atomic
    def update_status(shipment, new_status, location, description='', user=None, request=None):
        """
        Append one tracking event and move the shipment to new_status.

        Any status may follow any other. The receiver is emailed after commit.
        """
        previous_status = shipment.status
        description = description or f"Status updated to {humanize_status(new_status)}"

        event = TrackingEvent.objects.create(
            shipment=shipment,
            status=new_status,
            location=location,
            description=description,
        )

        shipment.status = new_status
        shipment.current_location = location
        shipment.save(update_fields=['status', 'current_location', 'updated_at'])

        _queue(
            'send_status_update_email_task',
            str(shipment.pk), new_status, location, event.description, _user_id(user)
        )

        _audit(
            AuditAction.SHIPMENT_STATUS_CHANGED, shipment, user, request,
            previous_data={'status': previous_status},
            new_data={'status': new_status, 'location': location, 'description': description},
        )
        logger.info(f"[SHIPMENT] {shipment.tracking_code}: {previous_status} -> {new_status} @ {location}")
        return event

    @staticmethod
    def get_event(shipment, event_id):
        """Tracking event of this shipment, else EventNotFoundError."""
        try:
            event = shipment.tracking_events.filter(pk=event_id).first()
        except (ValueError, DjangoValidationError):
            event = None
        if event is None:
            raise EventNotFoundError()
        return event

    @staticmethod
    def update_event(shipment, event_id, data):
        event = ShipmentService.get_event(shipment, event_id)
        for field in ('location', 'description'):
            if field in data:
                setattr(event, field, data[field])
        event.save()
        return event

    @staticmethod
    def delete_event(shipment, event_id):
        event = ShipmentService.get_event(shipment, event_id)
        event.delete()
        logger.info(f"[SHIPMENT] Deleted event {event_id} of {shipment.tracking_code}")

    @staticmethod
    def delete_shipment(shipment, user, request=None):
        """
        Delete a shipment, its tracking events and its hosted images.
        Image deletion failures are logged and do not block the delete.
        """
        from integrations.cloudinary import CloudinaryService, UploadError

        previous = snapshot(shipment)
        cloudinary = CloudinaryService()
        for image in shipment.package_images.all():
            try:
                cloudinary.delete(image.public_id)
            except UploadError as e:
                logger.error(f"[SHIPMENT] Failed to delete image {image.public_id}: {e}")
                continue
            _audit(
                AuditAction.FILE_DELETED, shipment, user, request,
                entity_type='PackageImage', entity_id=image.public_id,
                previous_data={'url': image.url, 'public_id': image.public_id, 'shipment_id': str(shipment.pk)},
            )

        with transaction.atomic():
            shipment.tracking_events.all().delete()
            _audit(AuditAction.SHIPMENT_DELETED, shipment, user, request, previous_data=previous)
            shipment.delete()

        logger.info(f"[SHIPMENT] Deleted {previous['tracking_code']}")

    @staticmethod
    def attach_image(shipment, url, public_id):
        """Add an uploaded image, refusing a sixth one."""
        if shipment.package_images.count() >= MAX_PACKAGE_IMAGES:
            raise ImageLimitError()
        return PackageImage.objects.create(shipment=shipment, url=url, public_id=public_id)


def _user_id(user):
    if user is None or not getattr(user, 'is_authenticated', False):
        return None
    return str(user.pk)
