from dataclasses import dataclass

DEFAULT_PORTAL_URL = (
    "http://www.sga.pr.gov.br/sga-iap/consultarProcessoLicenciamento.do?action=iniciar"
)


@dataclass(frozen=True)
class PortalLayout:
    """Entry URL and DOM hooks of the licensing portal."""

    search_url: str = DEFAULT_PORTAL_URL
    protocol_input: str = "#txtNumProtocolo-inputEl"
    search_button: str = "#botaoPesquisar_consultarProcessoLicenciamentoGrid"
    result_link: str = ".x-grid-cell-gridcolumn-1035 a"
    document_request_button: str = "#btnPesquisarGeradorResiduo-btnEl"
    challenge_image: str = "#gera_captcha"
    challenge_image_attribute: str = "src"
    challenge_answer_input: str = "#captchaDigitada-inputEl"
    # Matched by visible text; the button has no stable id.
    submit_tag: str = "button"
    submit_label: str = "Continuar"
