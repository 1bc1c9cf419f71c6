from __future__ import annotations

from typing import Any

from selfheal.core.models import ElementAttributes

SNAPSHOT_ELEMENTS_SCRIPT = r"""
const attr = (node, name) => node.getAttribute(name) || null;
const classOf = (node) => {
  if (typeof node.className === "string") return node.className || null;
  return node.getAttribute("class") || null;
};

const snapshot = (node) => {
  const rect = node.getBoundingClientRect();
  const parent = node.parentElement;
  const data = {};
  for (const item of Array.from(node.attributes)) {
    if (item.name.startsWith("data-")) data[item.name] = item.value;
  }
  return {
    tag_name: node.tagName.toLowerCase(),
    // Same 100 character cap as captured text: edit distance compares capped strings.
    text: (node.textContent || "").trim().substring(0, 100) || null,
    inner_text: (node.innerText || "").trim().substring(0, 100) || null,
    class_name: classOf(node),
    id: node.id || null,
    name: attr(node, "name"),
    placeholder: attr(node, "placeholder"),
    title: attr(node, "title"),
    aria_label: attr(node, "aria-label"),
    role: attr(node, "role"),
    type: attr(node, "type"),
    href: attr(node, "href"),
    src: attr(node, "src"),
    value: typeof node.value === "string" ? node.value || null : null,
    data_attributes: data,
    position: {
      x: rect.x,
      y: rect.y,
      width: rect.width,
      height: rect.height,
    },
    parent_info: parent
      ? {
          tag_name: parent.tagName.toLowerCase(),
          class_name: classOf(parent),
          id: parent.id || null,
        }
      : null,
  };
};

return Array.from(arguments[0]).map(snapshot);
"""


def extract_attributes(driver, elements: list[Any]) -> list[ElementAttributes]:
    if not elements:
        return []
    raw_items = driver.execute_script(SNAPSHOT_ELEMENTS_SCRIPT, list(elements)) or []
    return [ElementAttributes.model_validate(item) for item in raw_items]
