"""
Back-office management of the fleet: categories, vehicles, rental options
and their images.
"""

from typing import Any

import structlog
from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status
from sqlalchemy.engine import Engine

from car_rental import config
from car_rental.db.readers.bookings import count_vehicle_bookings
from car_rental.db.readers.catalog import (
    get_category,
    get_category_by_name,
    get_vehicle,
    list_categories,
    list_vehicles,
    max_category_order,
)
from car_rental.db.readers.pricing import (
    get_rental_option,
    get_rental_option_by_code,
    list_option_pricing,
    list_rental_options_with_pricing,
)
from car_rental.db.writers.pricing import replace_option_pricing
from car_rental.db.writers.rows import delete_row, insert_row, reorder_rows, update_row
from car_rental.dependencies import get_db_engine
from car_rental.models.catalog import Vehicle, VehicleCategory
from car_rental.models.options import RentalOption
from car_rental.routes._helpers import changes, require_row
from car_rental.schemas.catalog import (
    CategoryPayload,
    CategoryUpdatePayload,
    RentalOptionPayload,
    RentalOptionUpdatePayload,
    ReorderPayload,
    VehiclePayload,
    VehicleUpdatePayload,
)
from car_rental.security import require_admin
from car_rental.services.uploads import (
    InvalidUploadError,
    placeholder_path,
    remove_vehicle_image,
    save_content_image,
    save_rental_option_image,
    save_vehicle_image,
)

logger = structlog.get_logger(__name__)
router = APIRouter(dependencies=[Depends(require_admin)])


def conflict(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=detail)


def option_with_pricing(conn: Any, option_id: str) -> dict[str, Any]:
    option = require_row(get_rental_option(conn, option_id), "Rental option")
    option["pricing"] = list_option_pricing(conn, [option_id])
    return option


# =============================================================================
# Categories
# =============================================================================


@router.get("/categories")
def admin_list_categories(engine: Engine = Depends(get_db_engine)) -> dict[str, Any]:
    try:
        with engine.connect() as conn:
            rows = list_categories(conn)
        return {"success": True, "categories": rows}

    except Exception as e:
        logger.exception("admin_list_categories_failed", error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post("/categories", status_code=status.HTTP_201_CREATED)
def admin_create_category(
    payload: CategoryPayload, engine: Engine = Depends(get_db_engine)
) -> dict[str, Any]:
    """New categories are appended at the end of the display order."""
    try:
        with engine.begin() as conn:
            if get_category_by_name(conn, payload.name):
                raise conflict(f"Category '{payload.name}' already exists")
            data = payload.model_dump()
            data["display_order"] = max_category_order(conn) + 1
            category_id = insert_row(conn, VehicleCategory, data)
            category = get_category(conn, category_id)

        logger.info("category_created", category_id=category_id, name=payload.name)
        return {"success": True, "category": category}

    except HTTPException:
        raise
    except Exception as e:
        logger.exception("admin_create_category_failed", error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.put("/categories/{category_id}")
def admin_update_category(
    category_id: str,
    payload: CategoryUpdatePayload,
    engine: Engine = Depends(get_db_engine),
) -> dict[str, Any]:
    try:
        update_data = changes(payload)
        with engine.begin() as conn:
            require_row(get_category(conn, category_id), "Category")
            if "name" in update_data:
                existing = get_category_by_name(conn, update_data["name"])
                if existing and existing["id"] != category_id:
                    raise conflict(f"Category '{update_data['name']}' already exists")
            if update_data:
                update_row(conn, VehicleCategory, category_id, update_data)
            category = get_category(conn, category_id)

        logger.info("category_updated", category_id=category_id, fields=sorted(update_data))
        return {"success": True, "category": category}

    except HTTPException:
        raise
    except Exception as e:
        logger.exception("admin_update_category_failed", category_id=category_id, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.delete("/categories/{category_id}")
def admin_delete_category(
    category_id: str, engine: Engine = Depends(get_db_engine)
) -> dict[str, Any]:
    """
    Delete an empty category.

    Raises:
        HTTPException: 409 while vehicles still belong to it
    """
    try:
        with engine.begin() as conn:
            require_row(get_category(conn, category_id), "Category")
            if list_vehicles(conn, category_id=category_id):
                raise conflict("Category still has vehicles")
            delete_row(conn, VehicleCategory, category_id)

        logger.info("category_deleted", category_id=category_id)
        return {"success": True, "message": "Category deleted"}

    except HTTPException:
        raise
    except Exception as e:
        logger.exception("admin_delete_category_failed", category_id=category_id, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post("/categories/reorder")
def admin_reorder_categories(
    payload: ReorderPayload, engine: Engine = Depends(get_db_engine)
) -> dict[str, Any]:
    try:
        with engine.begin() as conn:
            reorder_rows(conn, VehicleCategory, payload.ids)
            rows = list_categories(conn)
        return {"success": True, "categories": rows}

    except Exception as e:
        logger.exception("admin_reorder_categories_failed", error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


# =============================================================================
# Vehicles
# =============================================================================


@router.get("/vehicles")
def admin_list_vehicles(engine: Engine = Depends(get_db_engine)) -> dict[str, Any]:
    try:
        with engine.connect() as conn:
            rows = list_vehicles(conn)
        return {"success": True, "vehicles": rows}

    except Exception as e:
        logger.exception("admin_list_vehicles_failed", error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post("/vehicles", status_code=status.HTTP_201_CREATED)
def admin_create_vehicle(
    payload: VehiclePayload, engine: Engine = Depends(get_db_engine)
) -> dict[str, Any]:
    """
    Add a vehicle. Its code is the group code and it starts with the
    category placeholder image.
    """
    try:
        with engine.begin() as conn:
            category = require_row(get_category(conn, payload.category_id), "Category")
            data = payload.model_dump()
            data["code"] = payload.group
            data["image"] = placeholder_path(category["name"])
            vehicle_id = insert_row(conn, Vehicle, data)
            vehicle = get_vehicle(conn, vehicle_id)

        logger.info("vehicle_created", vehicle_id=vehicle_id, group=payload.group)
        return {"success": True, "vehicle": vehicle}

    except HTTPException:
        raise
    except Exception as e:
        logger.exception("admin_create_vehicle_failed", error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.put("/vehicles/{vehicle_id}")
def admin_update_vehicle(
    vehicle_id: str,
    payload: VehicleUpdatePayload,
    engine: Engine = Depends(get_db_engine),
) -> dict[str, Any]:
    try:
        update_data = changes(payload)
        with engine.begin() as conn:
            require_row(get_vehicle(conn, vehicle_id), "Vehicle")
            if "category_id" in update_data:
                require_row(get_category(conn, update_data["category_id"]), "Category")
            if "group" in update_data:
                update_data["code"] = update_data["group"]
            if update_data:
                update_row(conn, Vehicle, vehicle_id, update_data)
            vehicle = get_vehicle(conn, vehicle_id)

        logger.info("vehicle_updated", vehicle_id=vehicle_id, fields=sorted(update_data))
        return {"success": True, "vehicle": vehicle}

    except HTTPException:
        raise
    except Exception as e:
        logger.exception("admin_update_vehicle_failed", vehicle_id=vehicle_id, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.delete("/vehicles/{vehicle_id}")
def admin_delete_vehicle(
    vehicle_id: str, engine: Engine = Depends(get_db_engine)
) -> dict[str, Any]:
    """
    Delete a vehicle and its image file.

    Raises:
        HTTPException: 409 if bookings reference the vehicle
    """
    try:
        with engine.begin() as conn:
            vehicle = require_row(get_vehicle(conn, vehicle_id), "Vehicle")
            if count_vehicle_bookings(conn, vehicle_id):
                raise conflict("Vehicle has bookings; hide it instead")
            delete_row(conn, Vehicle, vehicle_id)

        remove_vehicle_image(config.UPLOAD_ROOT, vehicle["image"])
        logger.info("vehicle_deleted", vehicle_id=vehicle_id)
        return {"success": True, "message": "Vehicle deleted"}

    except HTTPException:
        raise
    except Exception as e:
        logger.exception("admin_delete_vehicle_failed", vehicle_id=vehicle_id, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post("/vehicles/upload-image")
async def admin_upload_vehicle_image(
    vehicle_id: str = Form(..., alias="vehicleId"),
    image: UploadFile = File(...),
    engine: Engine = Depends(get_db_engine),
) -> dict[str, Any]:
    """
    Replace a vehicle's photo.

    The file is stored as ``vehicles/<category-folder>/<group>_<name>_<ts>.<ext>``
    and the previous file is removed unless it was a placeholder.

    Raises:
        HTTPException: 400 for a missing, oversized or non-image file, 404
        for an unknown vehicle
    """
    content = await image.read()

    try:
        with engine.connect() as conn:
            vehicle = require_row(get_vehicle(conn, vehicle_id), "Vehicle")

        path = save_vehicle_image(
            config.UPLOAD_ROOT,
            vehicle["category_name"],
            vehicle["group"],
            vehicle["name"],
            image.filename or "",
            content,
        )
        with engine.begin() as conn:
            update_row(conn, Vehicle, vehicle_id, {"image": path})

        if vehicle["image"] != path:
            remove_vehicle_image(config.UPLOAD_ROOT, vehicle["image"])
        return {"success": True, "image": path}

    except HTTPException:
        raise
    except InvalidUploadError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.exception("vehicle_image_upload_failed", vehicle_id=vehicle_id, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post("/vehicles/{vehicle_id}/remove-image")
def admin_remove_vehicle_image(
    vehicle_id: str, engine: Engine = Depends(get_db_engine)
) -> dict[str, Any]:
    """Delete a vehicle's photo and point it at its category placeholder."""
    try:
        with engine.begin() as conn:
            vehicle = require_row(get_vehicle(conn, vehicle_id), "Vehicle")
            placeholder = placeholder_path(vehicle["category_name"])
            update_row(conn, Vehicle, vehicle_id, {"image": placeholder})

        deleted = remove_vehicle_image(config.UPLOAD_ROOT, vehicle["image"])
        logger.info("vehicle_image_removed", vehicle_id=vehicle_id, file_deleted=deleted)
        return {"success": True, "image": placeholder, "file_deleted": deleted}

    except HTTPException:
        raise
    except Exception as e:
        logger.exception("vehicle_image_remove_failed", vehicle_id=vehicle_id, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


# =============================================================================
# Rental options
# =============================================================================


@router.get("/rental-options")
def admin_list_rental_options(engine: Engine = Depends(get_db_engine)) -> dict[str, Any]:
    try:
        with engine.connect() as conn:
            options = list_rental_options_with_pricing(conn)
        return {"success": True, "options": options}

    except Exception as e:
        logger.exception("admin_list_rental_options_failed", error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post("/rental-options", status_code=status.HTTP_201_CREATED)
def admin_create_rental_option(
    payload: RentalOptionPayload, engine: Engine = Depends(get_db_engine)
) -> dict[str, Any]:
    """
    Create a rental option with its price tiers.

    Raises:
        HTTPException: 409 if the code is already used
    """
    try:
        code = payload.code.strip().upper()
        with engine.begin() as conn:
            if get_rental_option_by_code(conn, code):
                raise conflict(f"Rental option code '{code}' already exists")
            data = payload.model_dump(exclude={"pricing"})
            data["code"] = code
            option_id = insert_row(conn, RentalOption, data)
            replace_option_pricing(conn, option_id, [t.model_dump() for t in payload.pricing])
            option = option_with_pricing(conn, option_id)

        logger.info("rental_option_created", option_id=option_id, code=code)
        return {"success": True, "option": option}

    except HTTPException:
        raise
    except Exception as e:
        logger.exception("admin_create_rental_option_failed", error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.put("/rental-options/{option_id}")
def admin_update_rental_option(
    option_id: str,
    payload: RentalOptionUpdatePayload,
    engine: Engine = Depends(get_db_engine),
) -> dict[str, Any]:
    """Update an option; a ``pricing`` list replaces all of its tiers."""
    try:
        update_data = changes(payload)
        tiers = update_data.pop("pricing", None)

        with engine.begin() as conn:
            require_row(get_rental_option(conn, option_id), "Rental option")
            if "code" in update_data:
                update_data["code"] = update_data["code"].strip().upper()
                existing = get_rental_option_by_code(conn, update_data["code"])
                if existing and existing["id"] != option_id:
                    raise conflict(f"Rental option code '{update_data['code']}' already exists")
            if update_data:
                update_row(conn, RentalOption, option_id, update_data)
            if tiers is not None:
                replace_option_pricing(conn, option_id, tiers)
            option = option_with_pricing(conn, option_id)

        logger.info("rental_option_updated", option_id=option_id, fields=sorted(update_data))
        return {"success": True, "option": option}

    except HTTPException:
        raise
    except Exception as e:
        logger.exception("admin_update_rental_option_failed", option_id=option_id, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.delete("/rental-options/{option_id}")
def admin_delete_rental_option(
    option_id: str, engine: Engine = Depends(get_db_engine)
) -> dict[str, Any]:
    try:
        with engine.begin() as conn:
            require_row(get_rental_option(conn, option_id), "Rental option")
            replace_option_pricing(conn, option_id, [])
            delete_row(conn, RentalOption, option_id)

        logger.info("rental_option_deleted", option_id=option_id)
        return {"success": True, "message": "Rental option deleted"}

    except HTTPException:
        raise
    except Exception as e:
        logger.exception("admin_delete_rental_option_failed", option_id=option_id, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post("/rental-options/upload-image")
async def admin_upload_rental_option_image(
    option_id: str = Form(..., alias="optionId"),
    image: UploadFile = File(...),
    engine: Engine = Depends(get_db_engine),
) -> dict[str, Any]:
    content = await image.read()

    try:
        with engine.connect() as conn:
            option = require_row(get_rental_option(conn, option_id), "Rental option")

        path = save_rental_option_image(
            config.UPLOAD_ROOT, option["code"], image.filename or "", content
        )
        with engine.begin() as conn:
            update_row(conn, RentalOption, option_id, {"photo": path})
        return {"success": True, "photo": path}

    except HTTPException:
        raise
    except InvalidUploadError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.exception("rental_option_image_upload_failed", option_id=option_id, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post("/content/upload-image")
async def admin_upload_content_image(image: UploadFile = File(...)) -> dict[str, Any]:
    """Store an image for blog posts or site content and return its public URL."""
    content = await image.read()

    try:
        path = save_content_image(config.UPLOAD_ROOT, image.filename or "", content)
        return {"success": True, "url": path}

    except InvalidUploadError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.exception("content_image_upload_failed", error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")
