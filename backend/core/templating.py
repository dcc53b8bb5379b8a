# backend/core/templating.py
from jinja2 import Environment, BaseLoader
from markupsafe import Markup

from core.config import settings
from core.i18n import translate

# Autoescape is on: plain values are escaped, Markup values are trusted.
jinja_env = Environment(loader=BaseLoader(), autoescape=True)
jinja_env.globals["_"] = translate

PAGE_TEMPLATE = """<!DOCTYPE html>
<html lang="{{ locale }}">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{{ title }}</title>
    <style>
        body { font-family: Arial, sans-serif; margin: 0; background: #f5f5f5; }
        .page { max-width: 720px; margin: 40px auto; background: white; padding: 32px; border-radius: 8px; box-shadow: 0 2px 10px rgba(0,0,0,0.1); }
        .affiliate-field-wrapper { margin-bottom: 16px; }
        .affiliate-field-wrapper input, .affiliate-field-wrapper textarea, .affiliate-field-wrapper select { width: 100%; max-width: 500px; }
        .affiliate-field-required { color: #cc0000; }
        .affiliate-message-success { color: #1e7e34; }
        .affiliate-message-error { color: #cc0000; }
        table { border-collapse: collapse; width: 100%; }
        th, td { border-bottom: 1px solid #ddd; padding: 8px; text-align: left; }
    </style>
</head>
<body>
    <div class="page">
        <h1>{{ title }}</h1>
        {{ body }}
    </div>
</body>
</html>"""


def render_string(template_content: str, **context) -> Markup:
    template = jinja_env.from_string(template_content)
    return Markup(template.render(**context))


def render_page(title: str, body: Markup) -> str:
    return render_string(PAGE_TEMPLATE, title=title, body=body, locale=settings.LOCALE)
