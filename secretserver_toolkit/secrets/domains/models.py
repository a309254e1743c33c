"""Domain models for Secret Server secrets."""
from dataclasses import dataclass, field as dataclass_field
from typing import Any, Dict, List, Tuple

from .errors import DecodeError


def _lookup(data: Dict[str, Any], key: str) -> Any:
    # Exact key first, then any key equal under case folding ("items", "fileAttachmentId")
    if key in data:
        return data[key]
    folded = key.lower()
    for name, value in data.items():
        if name.lower() == folded:
            return value
    return None


def wire_value(data: Dict[str, Any], key: str, kind: type, default: Any) -> Any:
    """
    Read a wire value, falling back to the zero value when absent or null.

    Keys match regardless of case, so the API's camelCase bodies decode
    the same as PascalCase ones.

    Raises:
        DecodeError: If the value is present but of the wrong JSON type
    """
    value = _lookup(data, key)
    if value is None:
        return default
    # bool is a subclass of int, so integers need the explicit check
    if not isinstance(value, kind) or (kind is int and isinstance(value, bool)):
        raise DecodeError(
            f"field {key}: expected {kind.__name__}, got {type(value).__name__}"
        )
    return value


def wire_object(data: Any, what: str) -> Dict[str, Any]:
    if not isinstance(data, dict):
        raise DecodeError(f"{what}: expected object, got {type(data).__name__}")
    return data


@dataclass
class SecretField:
    """One item (field) of a secret."""
    item_id: int = 0
    field_id: int = 0
    file_attachment_id: int = 0  # 0 means no attachment
    field_description: str = ""
    field_name: str = ""
    filename: str = ""
    item_value: str = ""
    slug: str = ""
    is_file: bool = False
    is_notes: bool = False
    is_password: bool = False

    @property
    def has_attachment(self) -> bool:
        return self.file_attachment_id != 0

    @classmethod
    def from_dict(cls, data: Any) -> "SecretField":
        data = wire_object(data, "secret item")
        return cls(
            item_id=wire_value(data, "ItemID", int, 0),
            field_id=wire_value(data, "FieldID", int, 0),
            file_attachment_id=wire_value(data, "FileAttachmentID", int, 0),
            field_description=wire_value(data, "FieldDescription", str, ""),
            field_name=wire_value(data, "FieldName", str, ""),
            filename=wire_value(data, "Filename", str, ""),
            item_value=wire_value(data, "ItemValue", str, ""),
            slug=wire_value(data, "Slug", str, ""),
            is_file=wire_value(data, "IsFile", bool, False),
            is_notes=wire_value(data, "IsNotes", bool, False),
            is_password=wire_value(data, "IsPassword", bool, False),
        )


@dataclass
class Secret:
    """A secret record as returned by the Secret Server."""
    name: str = ""
    folder_id: int = 0
    id: int = 0
    site_id: int = 0
    secret_template_id: int = 0
    secret_policy_id: int = 0
    active: bool = False
    checked_out: bool = False
    check_out_enabled: bool = False
    fields: List[SecretField] = dataclass_field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> "Secret":
        """
        Build a Secret from the decoded JSON body of a secret fetch.

        The wire key ``Items`` holds the secret's fields.

        Raises:
            DecodeError: If the body does not match the secret shape
        """
        data = wire_object(data, "secret")
        return cls(
            name=wire_value(data, "Name", str, ""),
            folder_id=wire_value(data, "FolderID", int, 0),
            id=wire_value(data, "ID", int, 0),
            site_id=wire_value(data, "SiteID", int, 0),
            secret_template_id=wire_value(data, "SecretTemplateID", int, 0),
            secret_policy_id=wire_value(data, "SecretPolicyID", int, 0),
            active=wire_value(data, "Active", bool, False),
            checked_out=wire_value(data, "CheckedOut", bool, False),
            check_out_enabled=wire_value(data, "CheckOutEnabled", bool, False),
            fields=[SecretField.from_dict(item) for item in wire_value(data, "Items", list, [])],
        )

    def field(self, field_name: str) -> Tuple[str, bool]:
        """
        Get the value of a field by its name or slug.

        Args:
            field_name: Field name or slug (exact, case-sensitive)

        Returns:
            Tuple of (value, found). The first matching field wins;
            ("", False) when no field matches.
        """
        for item in self.fields:
            if field_name == item.field_name or field_name == item.slug:
                return item.item_value, True
        return "", False
