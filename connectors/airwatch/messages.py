"""
Card text for the AirWatch connector.
"""

MESSAGES = {
    "en": {
        "card.header.title": "[AirWatch] {app}",
        "card.header.subtitle": "Not installed on this device",
        "card.body.description": "{app} is available for your device. Install it from the app catalog.",
        "card.field.platform.title": "Platform",
        "card.field.bundle.title": "App ID",
        "card.action.install.label": "Install",
        "card.action.install.completed": "Installing",
    },
    "xx": {
        "card.header.title": "xx[AirWatch] {app}xx",
        "card.header.subtitle": "xxNot installed on this devicexx",
        "card.body.description": "xx{app} is available for your device. Install it from the app catalog.xx",
        "card.field.platform.title": "xxPlatformxx",
        "card.field.bundle.title": "xxApp IDxx",
        "card.action.install.label": "xxInstallxx",
        "card.action.install.completed": "xxInstallingxx",
    },
}
