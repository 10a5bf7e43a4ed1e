"""Vendor registry and user lookups."""
from typing import List, Optional

from sqlalchemy.orm import Session

from models import User, Vendor
from repositories import UserRepository, VendorRepository, transaction
from services.access import Principal, ensure_active, ensure_manager
from exceptions import NotFoundError
from utils.validation import optional_string, validate_required_string
from constants import DEFAULT_VENDOR_COUNTRY, MAX_COMPANY_NAME_LENGTH
from logging_config import get_logger

logger = get_logger(__name__)


class VendorService:
    """Registers vendors and scopes vendor lists to their owners."""

    def __init__(self, db: Session):
        self.db = db
        self.vendors = VendorRepository(db)
        self.users = UserRepository(db)

    def create_vendor(
        self,
        principal: Principal,
        company_name: Optional[str],
        representative_name: Optional[str],
        email: Optional[str],
        phone: Optional[str],
        company_address: Optional[str] = None,
        country: Optional[str] = None,
    ) -> Vendor:
        """
        Register a vendor owned by the caller.

        Raises:
            InvalidInputError: Company name, representative, email or phone missing
        """
        ensure_active(principal)
        values = {
            "company_name": validate_required_string(company_name, "Company name", MAX_COMPANY_NAME_LENGTH),
            "representative_name": validate_required_string(representative_name, "Representative name", 255),
            "email": validate_required_string(email, "Email", 255),
            "phone": validate_required_string(phone, "Phone", 50),
            "company_address": optional_string(company_address),
            "country": optional_string(country, 100) or DEFAULT_VENDOR_COUNTRY,
        }

        with transaction(self.db):
            vendor = self.vendors.create(user_id=principal.id, **values)

        logger.info("Vendor registered", vendor_id=vendor.id, owner_id=principal.id)
        return vendor

    def list_vendors(self, principal: Principal) -> List[Vendor]:
        """Managers see every vendor; users see the vendors they registered."""
        ensure_active(principal)
        return self.vendors.list_vendors(None if principal.is_manager else principal.id)

    def get_vendor(self, vendor_id: int, principal: Principal) -> Vendor:
        """
        Raises:
            NotFoundError: Unknown vendor, or a user asking for someone else's vendor
        """
        ensure_active(principal)
        vendor = self.vendors.get_by_id(vendor_id)
        if not vendor or (not principal.is_manager and vendor.user_id != principal.id):
            raise NotFoundError("Vendor", vendor_id)
        return vendor

    def list_active_users(self, principal: Principal) -> List[User]:
        """Active non-manager users (manager only)."""
        ensure_manager(principal, "list users")
        return self.users.list_regular_users(active_only=True)
