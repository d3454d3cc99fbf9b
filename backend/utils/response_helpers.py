"""
Response helper utilities for handling UUID conversions and model validation
"""
from typing import Any, Dict, List, Optional
import uuid
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


def convert_uuids_to_strings(obj: Any) -> Any:
    """
    Recursively convert UUID objects to strings in any data structure
    """
    if isinstance(obj, uuid.UUID):
        return str(obj)
    elif isinstance(obj, dict):
        return {key: convert_uuids_to_strings(value) for key, value in obj.items()}
    elif isinstance(obj, list):
        return [convert_uuids_to_strings(item) for item in obj]
    else:
        return obj


def safe_model_validate(model_class: BaseModel, data: Any) -> BaseModel:
    """
    Safely validate a model by converting UUIDs to strings first
    """
    return model_class.model_validate(convert_uuids_to_strings(data))


def safe_model_validate_list(model_class: BaseModel, data_list: List[Any]) -> List[BaseModel]:
    return [safe_model_validate(model_class, item) for item in data_list]


def parse_uuid(value: Optional[str]) -> Optional[uuid.UUID]:
    """Parse an id coming from a path or payload; None if it is not a UUID"""
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError, AttributeError):
        return None


# Base model for the JSON surface: snake_case in Python, camelCase on the wire
class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True
    )


# Specific helper functions for common models
def user_to_dict(user) -> Dict[str, Any]:
    return {
        'id': user.id,
        'name': user.name,
        'email': user.email,
        'role': user.role,
        'location': user.location,
        'created_at': user.created_at
    }


def user_public_to_dict(user) -> Optional[Dict[str, Any]]:
    """Fields other marketplace participants may see"""
    if user is None:
        return None
    return {
        'id': user.id,
        'name': user.name,
        'role': user.role,
        'location': user.location
    }


def group_to_dict(group) -> Dict[str, Any]:
    return {
        'id': str(group.id),
        'creator_id': group.creator_id,
        'product': group.product,
        'price': group.price,
        'total_quantity': group.total_quantity,
        'min_join_quantity': group.min_join_quantity,
        'joined_quantity': group.joined_quantity,
        'pickup_point': group.pickup_point,
        'status': group.status,
        'created_at': group.created_at,
        'updated_at': group.updated_at
    }


def order_request_to_dict(order_request) -> Dict[str, Any]:
    return {
        'id': str(order_request.id),
        'vendor_id': order_request.vendor_id,
        'supplier_id': order_request.supplier_id,
        'product_id': order_request.product_id,
        'quantity': order_request.quantity,
        'notes': order_request.notes,
        'status': order_request.status,
        'created_at': order_request.created_at,
        'updated_at': order_request.updated_at
    }


def chat_message_to_dict(chat_message) -> Dict[str, Any]:
    return {
        'id': chat_message.id,
        'group_id': str(chat_message.group_id),
        'sender_id': chat_message.sender_id,
        'sender_name': chat_message.sender_name,
        'message': chat_message.message,
        'timestamp': chat_message.timestamp
    }
