from datetime import datetime

from postgrest.exceptions import APIError

CLAIM_TABLE = "order_split_claims"
UNIQUE_VIOLATION = "23505"

STATUS_PROCESSING = "processing"
STATUS_DONE = "done"


def insert_claim(client, order_id: str, claimed_at: datetime) -> bool:
    record = {
        "order_id": order_id,
        "status": STATUS_PROCESSING,
        "claimed_at": claimed_at.isoformat(),
        "updated_at": claimed_at.isoformat(),
    }
    try:
        client.table(CLAIM_TABLE).insert(record).execute()
    except APIError as exc:
        if exc.code == UNIQUE_VIOLATION:
            return False
        raise
    return True


def take_over_stale_claim(client, order_id: str, stale_before: datetime, claimed_at: datetime) -> bool:
    response = (
        client.table(CLAIM_TABLE)
        .update(
            {
                "status": STATUS_PROCESSING,
                "claimed_at": claimed_at.isoformat(),
                "updated_at": claimed_at.isoformat(),
            }
        )
        .eq("order_id", order_id)
        .eq("status", STATUS_PROCESSING)
        .lt("claimed_at", stale_before.isoformat())
        .execute()
    )
    return bool(response.data)


def update_status(client, order_id: str, *, status_value: str, updated_at: datetime) -> None:
    client.table(CLAIM_TABLE).update(
        {
            "status": status_value,
            "updated_at": updated_at.isoformat(),
        }
    ).eq("order_id", order_id).execute()


def delete_claim(client, order_id: str) -> None:
    client.table(CLAIM_TABLE).delete().eq("order_id", order_id).execute()
