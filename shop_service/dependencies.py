"""Dependency injection for services."""
from fastapi import Request

from shop_service.config import Settings
from shop_service.services.admin_service import AdminService
from shop_service.services.catalog_service import CatalogService
from shop_service.services.order_service import OrderService
from shop_service.uploads import ImageStore


def get_settings(request: Request) -> Settings:
    """Get settings from app state."""
    return request.app.state.settings


def get_admin_service() -> AdminService:
    return AdminService()


def get_catalog_service() -> CatalogService:
    return CatalogService()


def get_order_service(request: Request) -> OrderService:
    """Get order service configured with the application's stock policy."""
    return OrderService(CatalogService(), request.app.state.settings.stock_policy)


def get_image_store(request: Request) -> ImageStore:
    """Get image store writing to the configured upload directory."""
    return ImageStore(request.app.state.settings.upload_dir)
