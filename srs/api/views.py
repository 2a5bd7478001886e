from rest_framework import views, status
from rest_framework.response import Response
from django.utils import timezone
import structlog
import uuid
from ..data.models import Card
from ..domain.enums import QUALITY_LABELS, RECALL_LABELS
from ..domain.errors import ConcurrencyConflict, ValidationError
from ..domain.state import ReviewOutcome
from ..services.cards import create_card, delete_card, list_cards, update_card
from ..services.reviews import record_review
from ..services.study import build_study_session, owner_stats
from ..utils.time import to_local_iso
from .serializers import (
    CardInSerializer,
    CardUpdateSerializer,
    DueQuerySerializer,
    OwnerQuerySerializer,
    ReviewInSerializer,
    StatsQuerySerializer,
)

base_logger = structlog.get_logger()


def state_payload(state):
    return {
        "card_id": str(state.card_id),
        "owner_id": str(state.owner_id),
        "policy": state.policy.value,
        "level": state.level,
        "ease_factor": round(state.ease_factor, 2),
        "repetitions": state.repetitions,
        "interval_ms": state.last_interval_ms,
        "next_review_utc": state.next_review_at.isoformat(),
        "next_review_local": to_local_iso(state.next_review_at),
    }


def card_payload(card):
    return {
        "card_id": str(card.pk),
        "owner_id": str(card.owner_id),
        "front": card.front,
        "back": card.back,
        "policy": card.policy,
        "level": card.level,
        "ease_factor": round(card.ease_factor, 2),
        "repetitions": card.repetitions,
        "interval_ms": card.last_interval_ms,
        "next_review_utc": card.next_review_at.isoformat(),
        "next_review_local": to_local_iso(card.next_review_at),
    }


class CardCreateView(views.APIView):
    def post(self, request):
        logger = base_logger.bind(request_id=str(uuid.uuid4()))

        s = CardInSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        try:
            state = create_card(data["owner_id"], data["front"], data["back"], data.get("policy"))
        except ValidationError as e:
            return Response({"error": str(e)}, status=status.HTTP_400_BAD_REQUEST)

        card = Card.objects.get(pk=state.card_id)
        logger.info("card_api_response", card_id=str(card.pk), status=status.HTTP_201_CREATED)
        return Response(card_payload(card), status=status.HTTP_201_CREATED)


class CardDetailView(views.APIView):
    def get(self, request, card_id):
        card = Card.objects.filter(pk=card_id).first()
        if card is None:
            return Response({"error": "Card not found"}, status=status.HTTP_404_NOT_FOUND)
        return Response(card_payload(card))

    def put(self, request, card_id):
        s = CardUpdateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        try:
            card = update_card(data["owner_id"], card_id, data["front"], data["back"])
        except Card.DoesNotExist:
            return Response({"error": "Card not found"}, status=status.HTTP_404_NOT_FOUND)
        except ValidationError as e:
            return Response({"error": str(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(card_payload(card))

    def delete(self, request, card_id):
        qs = OwnerQuerySerializer(data=request.query_params)
        qs.is_valid(raise_exception=True)

        try:
            delete_card(qs.validated_data["owner_id"], card_id)
        except Card.DoesNotExist:
            return Response({"error": "Card not found"}, status=status.HTTP_404_NOT_FOUND)
        return Response(status=status.HTTP_204_NO_CONTENT)


class OwnerCardsView(views.APIView):
    def get(self, request, owner_id):
        cards = list_cards(owner_id)
        return Response(
            {
                "owner_id": str(owner_id),
                "count": len(cards),
                "cards": [card_payload(c) for c in cards],
            }
        )


class ReviewView(views.APIView):
    def post(self, request):
        # Create a unique request_id
        request_id = str(uuid.uuid4())
        logger = base_logger.bind(request_id=request_id)

        s = ReviewInSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        owner_id = s.validated_data["owner_id"]
        card_id = s.validated_data["card_id"]
        quality = s.validated_data["quality"]
        idem = s.validated_data["idempotency_key"]
        if quality is None:
            outcome = ReviewOutcome.recalled(s.validated_data["recalled"])
            label = RECALL_LABELS[outcome.recalled_correctly]
        else:
            outcome = ReviewOutcome.graded(quality)
            label = QUALITY_LABELS[quality]

        try:
            state, was_idem = record_review(owner_id, card_id, outcome, idem)
        except Card.DoesNotExist:
            return Response({"error": "Card not found"}, status=status.HTTP_404_NOT_FOUND)
        except ValidationError as e:
            return Response({"error": str(e)}, status=status.HTTP_400_BAD_REQUEST)
        except ConcurrencyConflict as e:
            logger.warning("review_api_conflict", card_id=str(card_id), error=str(e))
            return Response({"error": str(e)}, status=status.HTTP_409_CONFLICT)

        status_code = status.HTTP_200_OK if was_idem else status.HTTP_201_CREATED

        # Log with request_id & relevant context
        logger.info(
            "review_api_response",
            owner_id=str(owner_id),
            card_id=str(card_id),
            idempotent=was_idem,
            card_level=state.level,
            interval_ms=state.last_interval_ms,
            next_review_utc=state.next_review_at.isoformat(),
            status=status_code,
        )

        return Response(
            {**state_payload(state), "outcome_label": label, "idempotent": was_idem},
            status=status_code,
        )


class DueCardsView(views.APIView):
    def get(self, request, owner_id):
        # Create a unique request_id
        request_id = str(uuid.uuid4())
        logger = base_logger.bind(request_id=request_id)

        qs = DueQuerySerializer(data=request.query_params)
        qs.is_valid(raise_exception=True)
        at = qs.validated_data.get("at") or timezone.now()

        try:
            due = build_study_session(owner_id, qs.validated_data.get("limit"), at)
        except ValidationError as e:
            return Response({"error": str(e)}, status=status.HTTP_400_BAD_REQUEST)

        cards = Card.objects.in_bulk([s.card_id for s in due])
        results = [
            {**state_payload(s), "front": cards[s.card_id].front, "back": cards[s.card_id].back,
             "overdue_ms": s.overdue_ms(at)}
            for s in due
        ]

        logger.info(
            "due_cards_api_response",
            owner_id=str(owner_id),
            at_utc=at.isoformat(),
            at_local=to_local_iso(at),
            card_count=len(results),
        )

        return Response(
            {
                "owner_id": str(owner_id),
                "at_utc": at.isoformat(),
                "at_local": to_local_iso(at),
                "card_ids": [r["card_id"] for r in results],
                "cards": results,
            }
        )


class StatsView(views.APIView):
    def get(self, request, owner_id):
        qs = StatsQuerySerializer(data=request.query_params)
        qs.is_valid(raise_exception=True)
        at = qs.validated_data.get("at") or timezone.now()

        stats = owner_stats(owner_id, at)
        return Response({"owner_id": str(owner_id), "at_utc": at.isoformat(), **stats.as_dict()})
