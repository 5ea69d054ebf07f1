"""Services transverses aux locations."""

from .access_utils import UserLocationInfo, get_user_info_for_location

__all__ = ["UserLocationInfo", "get_user_info_for_location"]
