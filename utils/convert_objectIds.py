from datetime import datetime
from bson import ObjectId


def convert_objectids(obj):
    if isinstance(obj, ObjectId):
        return str(obj)
    elif isinstance(obj, datetime):
        return obj.isoformat()
    elif isinstance(obj, dict):
        return {k: convert_objectids(v) for k, v in obj.items()}
    elif isinstance(obj, list):
        return [convert_objectids(i) for i in obj]
    return obj


def document_to_record(doc: dict) -> dict:
    """Turn a raw MongoDB document into a plain record dict keyed by ``id``.

    Datetimes are kept as datetimes so the record models can parse them.
    """
    record = dict(doc)
    if "_id" in record:
        record["id"] = str(record.pop("_id"))
    return {
        k: (str(v) if isinstance(v, ObjectId) else v)
        for k, v in record.items()
    }
