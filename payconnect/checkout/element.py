"""
Widget composite du checkout: élément de paiement Stripe + option PayPal.

La surface de rendu (navigateur, webview, tests) est fournie par l'intégrateur et expose:
  - exists(selector) -> bool
  - render_layout(selector, with_wallet: bool)
  - on_click(element_id, handler)
  - apply_selection(view: SelectionView)
  - remove_wallet_option()
  - navigate(url)
"""
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional
import logging

from .api import ProcessorApi
from .flows import PaymentFlows, CompleteCallback, ErrorCallback
from .models import ActiveMethod, PaymentMode, WalletConfig
from .selector import MethodSelector
from .stripe_gateway import StripeService
from .wallet import WalletButtonHandlers, sdk_url

logger = logging.getLogger(__name__)

PRIMARY_CONTAINER_ID = "stripe-payment-element-container"
WALLET_OPTION_ID = "paypal-payment-option"
WALLET_BUTTON_CONTAINER_ID = "paypal-button-container"


@dataclass
class ComponentOptions:
    processor_url: str
    session_id: str
    payment_mode: PaymentMode
    elements: Any
    payment_element: Any
    surface: Any
    # Charge le SDK PayPal depuis son URL et retourne l'espace de noms `paypal`
    wallet_loader: Optional[Callable[[str], Awaitable[Any]]] = None
    on_complete: Optional[CompleteCallback] = None
    on_error: Optional[ErrorCallback] = None
    publishable_key: Optional[str] = None


class PaymentElementComponent:
    def __init__(
        self,
        options: ComponentOptions,
        *,
        api: Optional[ProcessorApi] = None,
        stripe: Optional[StripeService] = None,
    ):
        self.options = options
        self.surface = options.surface
        self.payment_element = options.payment_element
        self.api = api or ProcessorApi(options.processor_url, options.session_id)
        self.stripe = stripe or StripeService(options.elements, publishable_key=options.publishable_key)
        self.selector = MethodSelector()
        self.flows = PaymentFlows(
            self.api,
            self.stripe,
            options.payment_mode,
            on_complete=options.on_complete,
            on_error=options.on_error,
            navigate=self.surface.navigate,
        )
        self.wallet_config: Optional[WalletConfig] = None
        self.wallet_mounted = False
        self._unsubscribe: Optional[Callable[[], None]] = None

    async def _fetch_wallet_config(self) -> Optional[WalletConfig]:
        """PayPal non configuré (erreur ou clientId vide) => None, sans remonter d'erreur."""
        try:
            wallet_config = await self.api.get_paypal_config()
        except Exception as e:
            logger.info("checkout.element PayPal not configured, primary widget only (%s)", e)
            return None
        if not wallet_config.client_id:
            logger.info("checkout.element PayPal clientId empty, primary widget only")
            return None
        return wallet_config

    async def mount(self, selector: str) -> bool:
        """
        Rend le widget dans le conteneur. La config PayPal est lue une seule fois ici.
        Retourne False si le conteneur est introuvable.
        """
        if not self.surface.exists(selector):
            logger.error("checkout.element container not found selector=%s", selector)
            return False

        # Remontage: la sélection repart du widget principal
        if self._unsubscribe:
            self._unsubscribe()
        self.selector = MethodSelector()
        self.wallet_mounted = False

        self.wallet_config = await self._fetch_wallet_config()
        with_wallet = self.wallet_config is not None

        self.surface.render_layout(selector, with_wallet)
        self._unsubscribe = self.selector.subscribe(self.surface.apply_selection)
        self.surface.apply_selection(self.selector.view)
        if with_wallet:
            self.surface.on_click(WALLET_OPTION_ID, self.selector.select_alternative)

        self.payment_element.mount(f"#{PRIMARY_CONTAINER_ID}")
        self.payment_element.on("change", self.selector.on_primary_interaction)
        self.surface.on_click(PRIMARY_CONTAINER_ID, self.selector.on_primary_interaction)

        if with_wallet:
            await self._initialize_wallet(self.wallet_config)
        return True

    async def _initialize_wallet(self, wallet_config: WalletConfig) -> None:
        if self.wallet_mounted:
            return
        try:
            if not self.options.wallet_loader:
                raise RuntimeError("wallet_loader manquant")
            paypal = await self.options.wallet_loader(sdk_url(wallet_config))
            if not paypal:
                raise RuntimeError("PayPal SDK not loaded")
            handlers = WalletButtonHandlers(wallet_config, self.flows, self.selector)
            await paypal.Buttons(handlers.button_options()).render(f"#{WALLET_BUTTON_CONTAINER_ID}")
            self.wallet_mounted = True
        except Exception:
            logger.exception("checkout.element failed to initialize PayPal")
            self.selector.reset()
            self.surface.remove_wallet_option()

    async def submit(self) -> None:
        if self.selector.active_method is ActiveMethod.ALTERNATIVE_WALLET:
            # Le bouton PayPal déclenche lui-même l'enregistrement
            logger.info("checkout.element PayPal selected, use the PayPal button to complete payment")
            return
        await self.flows.submit()
