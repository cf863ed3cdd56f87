from zebra_printer.errors import InvalidGeometryError
from zebra_printer.models import PrinterSettings, TargetGeometry

MM_PER_INCH = 25.4


def margin_to_dots(margin_cm: float, dpi: int) -> int:
    # truncamento (não arredonda): define o tamanho do payload
    return int(margin_cm * 10 * dpi / MM_PER_INCH)


def compute_geometry(settings: PrinterSettings, margin_cm: float,
                     source_width: int, source_height: int) -> TargetGeometry:
    """
    Calcula margem em dots e o tamanho final da imagem na etiqueta.
    A altura mantém a proporção da imagem original; o comprimento da
    etiqueta inclui margem superior e inferior.
    """
    if margin_cm < 0:
        raise InvalidGeometryError(f"Margem negativa: {margin_cm} cm")
    if source_width <= 0 or source_height <= 0:
        raise InvalidGeometryError(
            f"Dimensões da imagem inválidas: {source_width}x{source_height}"
        )

    margin_dots = margin_to_dots(margin_cm, settings.dpi)
    target_width = settings.page_width_dots - 2 * margin_dots
    if target_width <= 0:
        raise InvalidGeometryError(
            f"Margem de {margin_cm} cm ({margin_dots} dots) não cabe em "
            f"{settings.page_width_dots} dots de largura"
        )

    target_height = (target_width * source_height) // source_width
    if target_height <= 0:
        raise InvalidGeometryError(
            f"Altura calculada é zero para imagem {source_width}x{source_height}"
        )

    return TargetGeometry(
        margin_dots=margin_dots,
        target_width=target_width,
        target_height=target_height,
        label_length_dots=target_height + 2 * margin_dots,
    )
