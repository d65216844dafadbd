"""
Portal Site Adapter

All knowledge of the legacy ICL portal markup lives here: selector strings
for the login form, the error banner, the post-login menu and the export
wizard. Workflows only talk to the adapter, so a markup change on the portal
is fixed in this module alone.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from ..models import Credentials


@dataclass(frozen=True)
class ExportControls:
    """Selectors of the member export wizard."""

    main_menu: str
    export_menu_item: str
    select_all_fields: str
    move_right: str
    member_statuses: tuple[str, ...]
    export_button: str
    outstanding_apps_modal_ok: str


class SiteAdapter(ABC):
    """
    Selector interface used by the workflows.

    Subclasses provide the selector strings of one portal layout.
    """

    username_field: str
    login_button: str
    error_banner: str
    success_marker: str
    export_controls: ExportControls

    def locate_username_field(self) -> str:
        return self.username_field

    def locate_login_button(self) -> str:
        return self.login_button

    def locate_error_banner(self) -> str:
        return self.error_banner

    def locate_success_marker(self) -> str:
        return self.success_marker

    def locate_export_controls(self) -> ExportControls:
        return self.export_controls

    @abstractmethod
    def login_fields(self, credentials: Credentials) -> list[tuple[str, str]]:
        """
        Map credentials onto login form inputs.

        Args:
            credentials: Member credentials

        Returns:
            (selector, value) pairs in fill order
        """
        pass


_FORM = "ctl00$pageContent$logUser$"


class LegacyPortalSite(SiteAdapter):
    """ASP.NET WebForms layout of the Moose International ICL admin portal."""

    username_field = f"input[name='{_FORM}UserName']"
    lastname_field = f"input[name='{_FORM}txtMemberLastName']"
    fru_number_field = f"input[name='{_FORM}txtFRUNumber']"
    passcode_field = f"input[name='{_FORM}Password']"
    login_button = f"input[name='{_FORM}LoginButton']"

    error_banner = "#ctl00_ctlMessageBox_DetailsLabel"
    success_marker = "#ctl00_mnuMainn3"

    export_controls = ExportControls(
        main_menu="#ctl00_mnuMainn3 > table > tbody > tr > td > a",
        export_menu_item="text=Export",
        select_all_fields="#ctl00_pageContent_cbSelectAllmemberFields",
        move_right="#ctl00_pageContent_btnMoveRight",
        member_statuses=(
            "#ctl00_pageContent_lvMemberStatus_ctrl0_cbSelected",
            "#ctl00_pageContent_lvMemberStatus_ctrl4_cbSelected",
        ),
        export_button="#ctl00_pageContent_btnExportData",
        outstanding_apps_modal_ok="input[name='ctl00$pageContent$btnOutstandingAppsModalOk']",
    )

    def login_fields(self, credentials: Credentials) -> list[tuple[str, str]]:
        return [
            (self.username_field, credentials.member_id),
            (self.lastname_field, credentials.lastname),
            (self.fru_number_field, credentials.fru_number),
            (self.passcode_field, credentials.fraternal_unit_passcode),
        ]


def create_site() -> SiteAdapter:
    """Factory function returning the adapter for the configured portal."""
    return LegacyPortalSite()
