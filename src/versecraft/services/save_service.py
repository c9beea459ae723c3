"""Serialization helpers for session save/load."""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping

from versecraft.core.types import EQUIP_SLOTS, ITEM_CATEGORIES
from versecraft.data.story_loader import humanize_id
from versecraft.domain.defs import MAX_ITEM_QTY, UseDef
from versecraft.domain.inventory import Inventory, InventoryItem
from versecraft.domain.resources import Progression, ResourcePool, Wallet
from versecraft.domain.state import PlayerState, SessionState
from versecraft.services.errors import SaveLoadError

logger = logging.getLogger(__name__)

SavePayload = Dict[str, Any]


class SaveService:
    """Converts a session to/from a validated, versioned payload."""

    SAVE_VERSION = 1

    def serialize(self, session: SessionState) -> SavePayload:
        """Return a JSON-serializable payload for the key-value store."""
        return {
            "saveVersion": self.SAVE_VERSION,
            "storyId": session.story_id,
            "sectionId": session.section_id,
            "savedAt": session.saved_at,
            "player": self.serialize_player(session.player),
        }

    def deserialize(self, payload: Mapping[str, Any]) -> SessionState:
        """Rehydrate a SessionState from a persisted payload."""
        if not isinstance(payload, Mapping):
            raise SaveLoadError("Save data must be a JSON object.")
        version = payload.get("saveVersion")
        if version != self.SAVE_VERSION:
            raise SaveLoadError(f"Unsupported save version: {version!r}.")
        story_id = self._require_str(payload.get("storyId"), "storyId")
        section_id = self._require_str(payload.get("sectionId"), "sectionId")
        saved_at = payload.get("savedAt")
        if saved_at is not None and not isinstance(saved_at, str):
            raise SaveLoadError("savedAt must be a string.")
        player = self.deserialize_player(self._require_dict(payload.get("player"), "player"))
        return SessionState(story_id=story_id, section_id=section_id, player=player, saved_at=saved_at)

    # ------------------------------------------------------------------ Player
    def serialize_player(self, player: PlayerState) -> Dict[str, Any]:
        inventory = player.inventory
        equipped: Dict[str, Any] = {}
        for slot in EQUIP_SLOTS:
            item = inventory.equipped(slot)
            equipped[slot] = self._serialize_item(item) if item is not None else None
        return {
            "resource": {
                "name": player.resource.name,
                "min": player.resource.min,
                "max": player.resource.max,
                "cur": player.resource.cur,
            },
            "progression": self.serialize_progression(player.progression),
            "currency": {"name": player.wallet.name, "amount": player.wallet.amount},
            "flags": sorted(player.flags),
            "inventory": {
                category: [self._serialize_item(row) for row in inventory.items(category)]
                for category in ITEM_CATEGORIES
            },
            "equip": {slot: inventory.equipped_id(slot) for slot in EQUIP_SLOTS},
            "equipped": equipped,
        }

    def deserialize_player(self, payload: Mapping[str, Any]) -> PlayerState:
        resource = self._coerce_resource(self._require_dict(payload.get("resource"), "player.resource"))
        progression = self.deserialize_progression(
            self._require_dict(payload.get("progression"), "player.progression")
        )
        wallet = self._coerce_wallet(payload.get("currency"))
        flags = set(self._coerce_str_list(payload.get("flags"), "player.flags"))
        inventory = self._coerce_inventory(payload.get("inventory"))
        self._coerce_equipment(payload.get("equip"), payload.get("equipped"), inventory)
        return PlayerState(
            resource=resource,
            progression=progression,
            wallet=wallet,
            flags=flags,
            inventory=inventory,
        )

    @staticmethod
    def serialize_progression(progression: Progression) -> Dict[str, int]:
        return {"xp": progression.xp, "xpMax": progression.xp_max, "level": progression.level}

    def deserialize_progression(self, payload: Mapping[str, Any]) -> Progression:
        xp_max = self._require_int(payload.get("xpMax"), "progression.xpMax")
        if xp_max <= 0:
            raise SaveLoadError("progression.xpMax must be positive.")
        xp = self._require_int(payload.get("xp"), "progression.xp")
        level = self._require_int(payload.get("level"), "progression.level")
        if level < 1:
            raise SaveLoadError("progression.level must be at least 1.")
        return Progression(xp=max(0, min(xp, xp_max)), xp_max=xp_max, level=level)

    # --------------------------------------------------------------- Coercion
    def _coerce_resource(self, payload: Mapping[str, Any]) -> ResourcePool:
        low = self._require_int(payload.get("min"), "player.resource.min")
        high = self._require_int(payload.get("max"), "player.resource.max")
        if high <= low:
            raise SaveLoadError("player.resource.max must exceed player.resource.min.")
        cur = self._require_int(payload.get("cur"), "player.resource.cur")
        if not low <= cur <= high:
            logger.warning("Saved resource value %d outside [%d, %d]; clamping.", cur, low, high)
            cur = max(low, min(high, cur))
        name = self._require_str(payload.get("name"), "player.resource.name")
        return ResourcePool(name=name, min=low, max=high, cur=cur)

    def _coerce_wallet(self, value: Any) -> Wallet:
        if value is None:
            return Wallet(name="Gold")
        mapping = self._require_dict(value, "player.currency")
        amount = self._require_int(mapping.get("amount"), "player.currency.amount")
        return Wallet(name=self._require_str(mapping.get("name"), "player.currency.name"), amount=max(0, amount))

    def _coerce_inventory(self, value: Any) -> Inventory:
        inventory = Inventory()
        if value is None:
            return inventory
        mapping = self._require_dict(value, "player.inventory")
        for category, rows in mapping.items():
            if category not in ITEM_CATEGORIES:
                raise SaveLoadError(f"player.inventory has unknown category '{category}'.")
            if not isinstance(rows, list):
                raise SaveLoadError(f"player.inventory.{category} must be a list.")
            for index, row in enumerate(rows):
                item = self._coerce_item(row, f"player.inventory.{category}[{index}]", category)
                if item.qty > 0:
                    inventory.add(item)
        return inventory

    def _coerce_equipment(self, equip_value: Any, equipped_value: Any, inventory: Inventory) -> None:
        equip_ids = self._require_dict(equip_value, "player.equip") if equip_value is not None else {}
        equipped = self._require_dict(equipped_value, "player.equipped") if equipped_value is not None else {}
        for slot in EQUIP_SLOTS:
            item_id = equip_ids.get(slot)
            record = equipped.get(slot)
            if item_id is None and record is None:
                continue
            if record is not None:
                item = self._coerce_item(record, f"player.equipped.{slot}", None)
            else:
                slot_id = self._require_str(item_id, f"player.equip.{slot}")
                item = InventoryItem(id=slot_id, name=humanize_id(slot_id), category=slot)
            if item_id is not None and item_id != item.id:
                raise SaveLoadError(f"player.equip.{slot} does not match player.equipped.{slot}.")
            if inventory.find(item.category, item.id) is not None:
                raise SaveLoadError(f"Equipped item '{item.id}' is also listed in player.inventory.{item.category}.")
            inventory.set_equipped(slot, item)

    def _coerce_item(self, value: Any, context: str, category: str | None) -> InventoryItem:
        mapping = self._require_dict(value, context)
        item_category = mapping.get("category", category)
        if item_category not in ITEM_CATEGORIES:
            raise SaveLoadError(f"{context}.category is not a known category.")
        if category is not None and item_category != category:
            raise SaveLoadError(f"{context}.category does not match its list.")
        qty = self._require_int(mapping.get("qty", 1), f"{context}.qty")
        if qty < 0:
            raise SaveLoadError(f"{context}.qty must be non-negative.")
        use = None
        if mapping.get("use") is not None:
            use_map = self._require_dict(mapping.get("use"), f"{context}.use")
            use = UseDef(
                kind=self._require_str(use_map.get("kind"), f"{context}.use.kind"),
                amount=self._require_int(use_map.get("amount", 0), f"{context}.use.amount"),
                tag=use_map.get("tag") if isinstance(use_map.get("tag"), str) else None,
            )
        equip_slot = mapping.get("equipSlot")
        if equip_slot is not None and equip_slot not in EQUIP_SLOTS:
            raise SaveLoadError(f"{context}.equipSlot is not a known slot.")
        return InventoryItem(
            id=self._require_str(mapping.get("id"), f"{context}.id"),
            name=self._require_str(mapping.get("name"), f"{context}.name"),
            category=item_category,
            qty=min(qty, MAX_ITEM_QTY),
            value=self._require_int(mapping.get("value", 0), f"{context}.value"),
            use=use,
            equip_slot=equip_slot,
        )

    @staticmethod
    def _serialize_item(item: InventoryItem) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "id": item.id,
            "name": item.name,
            "category": item.category,
            "qty": item.qty,
            "value": item.value,
        }
        if item.use is not None:
            payload["use"] = {"kind": item.use.kind, "amount": item.use.amount, "tag": item.use.tag}
        if item.equip_slot is not None:
            payload["equipSlot"] = item.equip_slot
        return payload

    @staticmethod
    def _require_str(value: Any, context: str) -> str:
        if not isinstance(value, str):
            raise SaveLoadError(f"{context} must be a string.")
        return value

    @staticmethod
    def _require_int(value: Any, context: str) -> int:
        if isinstance(value, bool) or not isinstance(value, int):
            raise SaveLoadError(f"{context} must be an integer.")
        return value

    @staticmethod
    def _require_dict(value: Any, context: str) -> Mapping[str, Any]:
        if not isinstance(value, Mapping):
            raise SaveLoadError(f"{context} must be an object.")
        return value

    def _coerce_str_list(self, value: Any, context: str) -> List[str]:
        if value is None:
            return []
        if not isinstance(value, list):
            raise SaveLoadError(f"{context} must be a list.")
        return [self._require_str(entry, f"{context}[]") for entry in value]
