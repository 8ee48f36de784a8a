from slotbook.api.app import AppContext, build_context, create_app

__all__ = ["AppContext", "build_context", "create_app"]
