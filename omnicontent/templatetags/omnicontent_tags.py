# omnicontent/templatetags/omnicontent_tags.py

from django import template
from django.utils.safestring import mark_safe

from omnicontent.pipeline import render_markdown

register = template.Library()


@register.filter(name="platform_html")
def platform_html_filter(value, platform="preview"):
    """
    Render markdown for a publishing platform.

    Usage:
      {{ post.body|platform_html }}
      {{ post.body|platform_html:"wechat" }}
    """
    return mark_safe(render_markdown(value or "", platform=platform))
