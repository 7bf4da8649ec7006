"""
Message Builder for the Order State Machine.

All operator-facing Spanish texts and their button layouts live here, so the
state machine only decides *what* to say. Texts use Telegram-style Markdown
(*bold*, _italic_, `code`).
"""

from typing import Iterable

from .actions import (
    AcceptNormalPrice,
    AddMoreItems,
    CancelOrder,
    ConfirmLineMatch,
    ConfirmOrder,
    ConfirmOrderWithoutNote,
    EditQuantity,
    PickLineCandidate,
    RemoveConfirmedItem,
    RequestSpecialPrice,
    RetryLine,
    SearchAgain,
    SelectClient,
    ShowHelp,
    ShowProducts,
    SkipLine,
    StartNewOrder,
)
from .collaborators import ProductRow
from .models import CatalogMatch, ConfirmedItem, OrderSession, PendingLine, PendingPricing
from .schemas import Button

SEPARATOR = "─" * 28

LINE_EXAMPLE = "```\n10 bolsa 8x12 negra\n5 camiseta blanca\n20 vaso desechable\n```"
ADD_MORE_EXAMPLE = "```\n10 8x12 negra\n5 t40 blanca\n```"

STATUS_ICONS = {
    "pendiente": "⏳",
    "aprobado": "✅",
    "empacado": "📦",
    "despachado": "🚚",
    "cancelado": "❌",
}

# Short acknowledgements shown when a button press cannot be applied
SESSION_EXPIRED = "Sesión expirada"
UNKNOWN_ACTION = "Acción no reconocida"
INVALID_PRODUCT = "Producto no válido"
STALE_ACTION = "Acción desactualizada"


def money(amount: float) -> str:
    """Format an amount as "$1,234.50"."""
    return f"${amount:,.2f}"


def signed_money(amount: float) -> str:
    """Format a price difference as "+$5.50" or "-$2.00"."""
    sign = "+" if amount >= 0 else "-"
    return f"{sign}{money(abs(amount))}"


def number(value: float) -> str:
    """Render stock without a trailing ".0" for whole quantities."""
    return str(int(value)) if float(value).is_integer() else f"{value:g}"


def stock_icon(stock: float, wanted: float) -> str:
    if stock >= wanted:
        return "✅"
    return "⚠️" if stock > 0 else "❌"


class MessageBuilder:
    """
    Builds prompt texts and button rows for every step of the order flow.
    """

    # ------------------------------------------------------------------
    # General
    # ------------------------------------------------------------------

    def welcome(self, first_name: str) -> tuple[str, list[list[Button]]]:
        text = (
            "🛒 *Bot de Ventas*\n\n"
            f"¡Hola {first_name}!\n\n"
            "Para crear un pedido simplemente escribe el *nombre del cliente*.\n"
            "Yo buscaré las coincidencias en la base de datos y tú confirmas cuál es.\n\n"
            "Luego me dices los productos y yo verifico stock y precios antes de crear la orden."
        )
        buttons = [
            [Button("🛒 Nuevo Pedido", StartNewOrder()), Button("📦 Ver Productos", ShowProducts())],
            [Button("❓ Ayuda", ShowHelp())],
        ]
        return text, buttons

    def help(self) -> str:
        return (
            "📖 *Comandos Disponibles*\n\n"
            "🛒 *Crear Pedido (flujo interactivo):*\n"
            "  Escribe el nombre del cliente y sigue las instrucciones\n"
            "  /pedido o /p — Iniciar nuevo pedido\n"
            "  /cancelar — Cancelar pedido en proceso\n\n"
            "🔍 *Búsqueda:*\n"
            "  /buscar o /b [texto] — Busca clientes y productos\n"
            "  /cliente o /c [nombre] — Busca un cliente\n"
            "  /stock o /s [producto] — Consulta inventario\n"
            "  /productos — Lista productos con stock\n\n"
            "📦 *Órdenes:*\n"
            "  /ordenes o /o — Ver estado de órdenes\n\n"
            "💡 *Flujo de pedido:*\n"
            "  1️⃣ Escribe nombre del cliente\n"
            "  2️⃣ Confirma el cliente correcto\n"
            "  3️⃣ Escribe los productos con cantidades\n"
            "  4️⃣ Verifica stock y precios\n"
            "  5️⃣ Confirma y crea la orden"
        )

    def usage(self, command: str, placeholder: str) -> str:
        return f"Uso: `/{command} {placeholder}`"

    def unknown_command(self) -> str:
        return "ℹ️ Comando no reconocido. Escribe /ayuda para ver los comandos."

    def ask_client(self) -> str:
        return "👤 *Nuevo Pedido*\n\nEscribe el nombre del cliente para buscarlo en la base de datos:"

    def ask_other_client(self) -> str:
        return "👤 Escribe otro nombre para buscar:"

    def order_cancelled(self) -> str:
        return "❌ Pedido cancelado."

    def no_order_in_progress(self) -> str:
        return "ℹ️ No hay ningún pedido en proceso."

    # ------------------------------------------------------------------
    # Clients
    # ------------------------------------------------------------------

    def clients_not_found(self, query: str) -> tuple[str, list[list[Button]]]:
        text = f"❌ No se encontró ningún cliente con *\"{query}\"*\n\nIntenta con otro nombre."
        return text, [[Button("🔄 Buscar otro nombre", SearchAgain())]]

    def clients_found(self, query: str, names: list[str]) -> tuple[str, list[list[Button]]]:
        lines = [f"👥 *Clientes encontrados para \"{query}\":*\n"]
        lines.extend(f"{i}. {name}" for i, name in enumerate(names, start=1))
        lines.append("\n_Selecciona el cliente correcto:_")
        buttons = [[Button(name, SelectClient(name))] for name in names]
        buttons.append([Button("🔄 Buscar otro", SearchAgain())])
        return "\n".join(lines), buttons

    def client_selected(self, name: str) -> str:
        return (
            f"✅ *Cliente:* {name}\n\n"
            "📝 Ahora escribe los productos del pedido.\n"
            "Un producto por línea con la cantidad:\n\n"
            f"{LINE_EXAMPLE}\n\n"
            "_Escribe /cancelar para cancelar el pedido_"
        )

    # ------------------------------------------------------------------
    # Product entry
    # ------------------------------------------------------------------

    def unparseable_products(self) -> str:
        return (
            "⚠️ No pude interpretar los productos.\n\n"
            "Escribe en formato:\n`10 nombre del producto`\n`5 otro producto`"
        )

    def verifying(self, count: int) -> str:
        return f"🔍 Verificando {count} producto(s) en inventario..."

    def ask_more_products(self, session: OrderSession) -> str:
        return (
            "➕ *Agregar más productos*\n\n"
            f"Ya tienes *{len(session.confirmed_items)}* producto(s) confirmados "
            f"para *{session.client}*.\n"
            "Escribe los nuevos productos con cantidad:\n\n"
            f"{ADD_MORE_EXAMPLE}\n\n"
            "_Los nuevos se agregarán a los existentes._"
        )

    # ------------------------------------------------------------------
    # Line verification
    # ------------------------------------------------------------------

    def line_not_found(self, idx: int, total: int, line: PendingLine) -> tuple[str, list[list[Button]]]:
        text = (
            f"({idx + 1}/{total}) ❌ *No encontrado:* \"{line.original_text}\" (×{line.requested_qty})\n\n"
            "No se encontró en el inventario.\n"
            "Puedes buscar con otro nombre, omitirlo o cancelar."
        )
        buttons = [
            [Button("🔍 Buscar con otro nombre", RetryLine(idx))],
            [Button("⏭️ Omitir este producto", SkipLine(idx))],
            [Button("❌ Cancelar pedido", CancelOrder())],
        ]
        return text, buttons

    def line_single_match(self, idx: int, total: int, line: PendingLine) -> tuple[str, list[list[Button]]]:
        match = line.candidates[0]
        wanted = line.requested_qty
        stock_ok = match.stock >= wanted

        lines = [
            f"({idx + 1}/{total}) 📦 *\"{line.original_text}\"* (×{wanted})\n",
            "Producto encontrado:",
            f"*{match.description}*",
            f"Código: `{match.code}`",
            f"Precio: *{money(match.price)}*",
            f"Stock: {'✅' if stock_ok else '⚠️'} *{number(match.stock)}* unidades",
        ]
        if not stock_ok and match.stock > 0:
            lines.append(f"\n⚠️ _Stock insuficiente (pides {wanted}, hay {number(match.stock)})_")
        elif match.stock <= 0:
            lines.append("\n❌ _Sin stock disponible_")
        lines.append(f"\nSubtotal: *{money(match.price * wanted)}*")

        buttons: list[list[Button]] = []
        if stock_ok:
            buttons.append([Button(f"✅ Confirmar — {money(match.price)} c/u", ConfirmLineMatch(idx, match.code))])
        elif match.stock > 0:
            buttons.append([Button("⚠️ Aceptar (stock limitado)", ConfirmLineMatch(idx, match.code))])
        buttons.append([Button("⏭️ Omitir", SkipLine(idx)), Button("✏️ Cambiar cantidad", EditQuantity(idx))])
        buttons.append([Button("🔍 Buscar otro nombre", RetryLine(idx))])
        return "\n".join(lines), buttons

    def line_multiple_matches(self, idx: int, total: int, line: PendingLine) -> tuple[str, list[list[Button]]]:
        wanted = line.requested_qty
        lines = [
            f"({idx + 1}/{total}) 📦 *\"{line.original_text}\"* (×{wanted})\n",
            f"Se encontraron *{len(line.candidates)}* coincidencias:\n",
        ]
        buttons: list[list[Button]] = []
        for i, match in enumerate(line.candidates):
            lines.append(f"{i + 1}. {stock_icon(match.stock, wanted)} *{match.description}*")
            lines.append(f"   `{match.code}` — Stock: {number(match.stock)} — {money(match.price)}\n")
            buttons.append([Button(f"{i + 1}. {match.description[:30]}", PickLineCandidate(idx, i))])
        buttons.append([Button("⏭️ Omitir", SkipLine(idx)), Button("🔍 Buscar otro", RetryLine(idx))])
        lines.append("_Selecciona el producto correcto:_")
        return "\n".join(lines), buttons

    def line_skipped(self, line: PendingLine) -> str:
        return f"⏭️ _Omitido: \"{line.original_text}\" (×{line.requested_qty})_"

    def ask_quantity(self, line: PendingLine) -> str:
        return (
            f"✏️ *Editar cantidad para:* \"{line.original_text}\"\n"
            f"Cantidad actual: {line.requested_qty}\n\nEscribe la nueva cantidad:"
        )

    def invalid_quantity(self) -> str:
        return "⚠️ Escribe un número válido (mínimo 1):"

    def quantity_updated(self, quantity: int) -> str:
        return f"✅ Cantidad actualizada a *{quantity}*"

    def ask_retry_text(self, line: PendingLine) -> str:
        return (
            f"🔍 *Buscando de nuevo:* \"{line.original_text}\" (×{line.requested_qty})\n\n"
            "Escribe otro nombre o descripción para buscar este producto:"
        )

    # ------------------------------------------------------------------
    # Pricing
    # ------------------------------------------------------------------

    def ask_price_type(self, match: CatalogMatch, quantity: int, idx: int) -> tuple[str, list[list[Button]]]:
        text = (
            f"💰 *{match.description}* (×{quantity})\n\n"
            f"Precio normal: *{money(match.price)}*\n"
            f"Subtotal: *{money(match.price * quantity)}*\n\n"
            "_¿Facturar a precio normal o precio especial?_"
        )
        buttons = [
            [Button(f"💲 Normal — {money(match.price)}", AcceptNormalPrice(idx))],
            [Button("✏️ Precio Especial", RequestSpecialPrice(idx))],
        ]
        return text, buttons

    def normal_price_applied(self, item: ConfirmedItem) -> str:
        return (
            f"✅ *Confirmado:* {item.description}\n"
            f"   {item.quantity} × {money(item.price)} = *{money(item.line_total)}*"
        )

    def ask_special_price(self, pricing: PendingPricing) -> str:
        return (
            f"✏️ *Precio especial para:* {pricing.description} (×{pricing.quantity})\n"
            f"Precio normal: {money(pricing.normal_price)}\n\n"
            "Escribe el precio especial (solo el número):"
        )

    def invalid_price(self) -> str:
        return "⚠️ Escribe un precio válido (ejemplo: `85.50`)"

    def special_price_applied(self, item: ConfirmedItem) -> str:
        original = item.original_price or 0.0
        return (
            f"✅ *Precio especial aplicado:* {item.description}\n"
            f"   {item.quantity} × {money(item.price)} = *{money(item.line_total)}*\n"
            f"   _Normal: {money(original)} ({signed_money(item.price - original)})_"
        )

    # ------------------------------------------------------------------
    # Summary and commit
    # ------------------------------------------------------------------

    def empty_summary(self) -> tuple[str, list[list[Button]]]:
        text = "⚠️ No hay productos confirmados en el pedido.\nTodos fueron omitidos."
        buttons = [
            [Button("📝 Escribir productos de nuevo", AddMoreItems())],
            [Button("❌ Cancelar", CancelOrder())],
        ]
        return text, buttons

    def summary(self, session: OrderSession) -> tuple[str, list[list[Button]]]:
        items = session.confirmed_items
        lines = [
            "📋 *RESUMEN DEL PEDIDO*\n",
            f"👤 *Cliente:* {session.client}",
            SEPARATOR,
            "📦 *Productos:*\n",
        ]
        for i, item in enumerate(items, start=1):
            lines.append(f"{i}. {'✅' if item.stock_ok else '⚠️'} *{item.description}*")
            lines.append(f"   {item.quantity} × {money(item.price)} = *{money(item.line_total)}*")
            if item.has_special_price:
                diff = signed_money(item.price - item.original_price)
                lines.append(f"   _💲 Precio especial (normal: {money(item.original_price)}, {diff})_")
            if not item.stock_ok:
                lines.append(f"   _⚠️ Stock: {number(item.stock)}_")
            lines.append("")
        lines.append(SEPARATOR)
        lines.append(f"💰 *TOTAL: {money(session.total())}*\n")
        lines.append("_¿Confirmar para crear la orden?_")

        buttons = [
            [Button("✅ Confirmar Pedido", ConfirmOrder())],
            [Button("➕ Agregar más productos", AddMoreItems())],
        ]
        for i, item in enumerate(items):
            buttons.append([Button(f"🗑️ Quitar: {item.description[:22]}", RemoveConfirmedItem(i))])
        buttons.append([Button("❌ Cancelar Pedido", CancelOrder())])
        return "\n".join(lines), buttons

    def ask_note(self) -> tuple[str, list[list[Button]]]:
        text = (
            "📝 *¿Deseas agregar una nota al pedido?*\n\n"
            "Puedes escribir observaciones, cambios, o cualquier novedad.\n"
            "Ejemplo: _\"Mandar cambio de $500\"_, _\"Entregar después de las 3pm\"_\n\n"
            "Escribe la nota o presiona el botón para continuar sin nota:"
        )
        return text, [[Button("⏭️ Sin nota — Crear orden directamente", ConfirmOrderWithoutNote())]]

    def order_created(self, order_id: int, client: str, items: list[ConfirmedItem], note: str, total: float) -> str:
        lines = [
            f"🎉 *¡Orden #{order_id} creada exitosamente!*\n",
            f"👤 *Cliente:* {client}",
            "📦 *Productos:*",
        ]
        lines.extend(f"  • {item.quantity}× {item.description} — {money(item.line_total)}" for item in items)
        if note:
            lines.append(f"\n📝 *Nota:* {note}")
        lines.append(f"\n💰 *Total:* {money(total)}")
        lines.append("⏳ *Estado:* Pendiente")
        return "\n".join(lines)

    def order_failed(self) -> str:
        return (
            "⚠️ No se pudo guardar la orden. Tu pedido sigue abierto; "
            "intenta confirmar de nuevo en un momento."
        )

    def nothing_to_commit(self) -> str:
        return "⚠️ El pedido no tiene productos confirmados."

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def product_hits(self, query: str, matches: Iterable[CatalogMatch]) -> str:
        lines = [f"📦 *Resultados para \"{query}\":*\n"]
        for match in matches:
            icon = "✅" if match.stock > 0 else "❌"
            lines.append(f"{icon} *{match.description}*")
            lines.append(f"   Stock: {number(match.stock)} — {money(match.price)}\n")
        lines.append("_Para crear un pedido, escribe el nombre del cliente._")
        return "\n".join(lines)

    def stock_lookup(self, query: str, rows: list[ProductRow], limit: int) -> str:
        if not rows:
            return f"❌ No se encontraron productos con \"{query}\""
        lines = [f"📦 *Resultados para \"{query}\":*\n"]
        for row in rows[:limit]:
            icon = "✅" if row.stock > 0 else "❌"
            lines.append(f"{icon} *{row.description}*")
            lines.append(f"   `{row.code}` | Stock: {number(row.stock)} | {money(row.price)}\n")
        if len(rows) > limit:
            lines.append(f"_...y {len(rows) - limit} más_")
        return "\n".join(lines)

    def product_list(self, rows: list[ProductRow]) -> str:
        if not rows:
            return "📦 No hay productos con stock"
        lines = ["📦 *Productos con Stock:*\n"]
        for row in rows:
            lines.append(f"• *{row.description}*")
            lines.append(f"  `{row.code}` — Stock: {number(row.stock)} — {money(row.price)}")
        return "\n".join(lines)

    def combined_search(self, query: str, clients: list[str], rows: list[ProductRow]) -> str:
        lines = [f"🔍 *Resultados para \"{query}\":*\n"]
        if clients:
            lines.append("👥 *Clientes:*")
            lines.extend(f"  • {name}" for name in clients)
            lines.append("")
        if rows:
            lines.append("📦 *Productos:*")
            for row in rows:
                icon = "✅" if row.stock > 0 else "❌"
                lines.append(f"  {icon} {row.description} ({number(row.stock)}) — {money(row.price)}")
        if not clients and not rows:
            lines.append("❌ Sin resultados")
        return "\n".join(lines)

    def order_status_counts(self, counts: list[tuple[str, int]]) -> str:
        lines = ["📋 *Estado de Órdenes:*\n"]
        for status, total in counts:
            lines.append(f"{STATUS_ICONS.get(status, '•')} *{status}:* {total}")
        if not counts:
            lines.append("_No hay órdenes registradas_")
        return "\n".join(lines)

    def lookup_failed(self, what: str) -> str:
        return f"⚠️ Error al buscar {what}."
