import importlib
import pkgutil

from fastapi import FastAPI


def include_routers(app: FastAPI, package_name: str, package_path) -> list:
    """패키지 안에서 `router`를 가진 모든 모듈을 앱에 등록하고 모듈명 목록을 반환"""
    included = []
    for _, module_name, _ in pkgutil.iter_modules(package_path):
        module = importlib.import_module(f"app.{package_name}.{module_name}")
        if hasattr(module, "router"):
            app.include_router(module.router)
            included.append(module_name)
    return sorted(included)
