from pydantic import BaseModel
from pydantic.alias_generators import to_camel
from typing import Literal, Optional, List
from datetime import datetime


class WireModel(BaseModel):
    """Accepts the wizard's camelCase field names as well as snake_case."""
    class Config:
        alias_generator = to_camel
        populate_by_name = True


class AssessmentFields(WireModel):
    service_type: Optional[Literal["site-assessment", "fleet-tracking", "fleet-camera"]] = None
    organization_id: Optional[int] = None

    sales_executive_name: Optional[str] = None
    sales_executive_email: Optional[str] = None
    sales_executive_phone: Optional[str] = None

    customer_company_name: Optional[str] = None
    customer_contact_name: Optional[str] = None
    customer_email: Optional[str] = None
    customer_phone: Optional[str] = None
    site_address: Optional[str] = None
    industry: Optional[str] = None
    preferred_installation_date: Optional[datetime] = None

    building_type: Optional[str] = None
    coverage_area: Optional[int] = None
    floors: Optional[int] = None
    device_count: Optional[int] = None
    router_count: Optional[int] = None
    total_fleet_size: Optional[int] = None
    power_available: Optional[bool] = None
    ethernet_required: Optional[bool] = None
    ceiling_mount: Optional[bool] = None
    outdoor_coverage: Optional[bool] = None
    network_signal: Optional[str] = None
    signal_strength: Optional[str] = None
    connection_usage: Optional[str] = None
    router_location: Optional[str] = None
    antenna_cable: Optional[str] = None
    device_connection_assistance: Optional[str] = None
    low_signal_antenna_cable: Optional[str] = None
    antenna_type: Optional[str] = None
    antenna_installation_location: Optional[str] = None
    router_mounting: Optional[str] = None
    dual_wan_support: Optional[str] = None
    ceiling_height: Optional[str] = None
    ceiling_type: Optional[str] = None
    router_make: Optional[str] = None
    router_model: Optional[str] = None
    cable_footage: Optional[str] = None
    camera_types: Optional[List[str]] = None
    existing_system_removal: Optional[str] = None
    interference_sources: Optional[str] = None
    special_requirements: Optional[str] = None

    additional_notes: Optional[str] = None


class OrganizationCreate(WireModel):
    name: str
    partner_organization: Optional[str] = None
    phone: Optional[str] = None


class CustomerAction(BaseModel):
    feedback: Optional[str] = None


class PartnerStatusUpdate(BaseModel):
    status: str


class UserActiveToggle(WireModel):
    is_active: bool


class InvitationCreate(WireModel):
    email: str
    recipient_name: Optional[str] = None
    company_name: Optional[str] = None
