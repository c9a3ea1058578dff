# hms/dependencies/services.py
from fastapi import BackgroundTasks, Depends, Request

from hms.core.config import Settings
from hms.core.services import AppServices
from hms.services.live_updates import ChangeNotifier
from hms.services.paystack_client import PaystackClient


def get_services(request: Request) -> AppServices:
    return request.app.state.services


def get_app_settings(services: AppServices = Depends(get_services)) -> Settings:
    return services.settings


def get_payment_client(services: AppServices = Depends(get_services)) -> PaystackClient:
    return services.payments


def get_change_notifier(
    background_tasks: BackgroundTasks,
    services: AppServices = Depends(get_services),
) -> ChangeNotifier:
    return ChangeNotifier(services.live_updates, background_tasks)
