"""
Cold-start provisioning for the import.

Resolves (or creates) the working folders under the root Drive folder and
the report spreadsheet under Report, and returns the IDs as an immutable
ImportContext that every other component receives explicitly.
"""
from typing import Callable, Dict, Optional, Tuple

from isk_import import config
from isk_import.drive.drive_store import DriveStore
from isk_import.errors import ConfigurationError
from isk_import.models import ImportContext
from isk_import.sheets.report_sheet import ReportSheet
from isk_import.utils.logger import get_logger

WORKING_FOLDERS = (
    config.UPLOAD_FOLDER_NAME,
    config.PROCESSED_FOLDER_NAME,
    config.FAILED_FOLDER_NAME,
    config.REPORT_FOLDER_NAME,
)


def setup_folders(drive: DriveStore, root_folder_id: str) -> Dict[str, str]:
    """
    Map each working folder name to its ID, creating any that are missing.

    Returns:
        {folder_name: folder_id} for all four working folders
    """
    logger = get_logger()
    found: Dict[str, str] = {}
    for folder in drive.list_children(root_folder_id, folders_only=True):
        name = folder.get("name")
        if name in WORKING_FOLDERS and name not in found:
            found[name] = folder["id"]

    for name in WORKING_FOLDERS:
        if name not in found:
            created = drive.create_folder(name, root_folder_id)
            found[name] = created["id"]
            logger.info(f"Created folder '{name}' ({created['id']})", component="Bootstrap")

    return found


def setup_sheet(
    drive: DriveStore,
    report_folder_id: str,
    sheet_factory: Callable[[str], ReportSheet] = ReportSheet,
) -> Tuple[str, ReportSheet]:
    """Find or create the report spreadsheet and make sure it has headers."""
    logger = get_logger()
    existing = drive.find_child(
        report_folder_id, config.REPORT_SHEET_NAME, mime_type=config.SPREADSHEET_MIME_TYPE
    )
    if existing:
        sheet_id = existing["id"]
    else:
        sheet_id = drive.create_spreadsheet(config.REPORT_SHEET_NAME, report_folder_id)["id"]
        logger.info(f"Created spreadsheet '{config.REPORT_SHEET_NAME}' ({sheet_id})", component="Bootstrap")

    sheet = sheet_factory(sheet_id)
    if sheet.ensure_headers():
        logger.info("Wrote report header row", component="Bootstrap")
    return sheet_id, sheet


def bootstrap(
    drive: DriveStore,
    root_folder_id: Optional[str] = None,
    sheet_factory: Callable[[str], ReportSheet] = ReportSheet,
) -> Tuple[ImportContext, ReportSheet]:
    """
    Resolve everything the import needs before the first sweep.

    Args:
        drive: Drive store used for lookups and creation
        root_folder_id: Root folder; defaults to config.DRIVE_FOLDER_ID
        sheet_factory: Builds a ReportSheet from a spreadsheet ID

    Returns:
        (context, report_sheet)
    """
    root_folder_id = root_folder_id or config.DRIVE_FOLDER_ID
    if not root_folder_id:
        raise ConfigurationError("DRIVE_FOLDER_ID is not set")

    folders = setup_folders(drive, root_folder_id)
    sheet_id, sheet = setup_sheet(drive, folders[config.REPORT_FOLDER_NAME], sheet_factory)

    context = ImportContext(
        root_folder_id=root_folder_id,
        upload_folder_id=folders[config.UPLOAD_FOLDER_NAME],
        processed_folder_id=folders[config.PROCESSED_FOLDER_NAME],
        failed_folder_id=folders[config.FAILED_FOLDER_NAME],
        report_folder_id=folders[config.REPORT_FOLDER_NAME],
        sheet_id=sheet_id,
    )
    get_logger().info(
        f"Context ready - upload {context.upload_folder_id}, sheet {context.sheet_id}",
        component="Bootstrap",
    )
    return context, sheet
