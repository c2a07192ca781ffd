"""
Sélection exclusive entre le widget principal (Stripe) et le wallet alternatif (PayPal).

Machine à états (deux états, état initial PRIMARY_WIDGET):
    PRIMARY_WIDGET --select_alternative--> ALTERNATIVE_WALLET
    ALTERNATIVE_WALLET --primary_interaction--> PRIMARY_WIDGET
    * --reset--> PRIMARY_WIDGET (annulation du wallet, remontage)

Le widget principal ne peut pas être désélectionné depuis l'extérieur:
quand le wallet est actif, son interactivité est bloquée (vue "dimmed").
"""
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Tuple
import logging

from .models import ActiveMethod

logger = logging.getLogger(__name__)


class SelectionEvent(str, Enum):
    SELECT_ALTERNATIVE = "select_alternative"
    PRIMARY_INTERACTION = "primary_interaction"
    RESET = "reset"


@dataclass(frozen=True)
class SelectionView:
    """Affordances visuelles dérivées de l'état actif."""
    alternative_selected: bool
    primary_dimmed: bool
    primary_interactive: bool
    wallet_button_visible: bool


INITIAL_METHOD = ActiveMethod.PRIMARY_WIDGET

_TRANSITIONS: Dict[Tuple[ActiveMethod, SelectionEvent], ActiveMethod] = {
    (ActiveMethod.PRIMARY_WIDGET, SelectionEvent.SELECT_ALTERNATIVE): ActiveMethod.ALTERNATIVE_WALLET,
    (ActiveMethod.ALTERNATIVE_WALLET, SelectionEvent.SELECT_ALTERNATIVE): ActiveMethod.ALTERNATIVE_WALLET,
    (ActiveMethod.PRIMARY_WIDGET, SelectionEvent.PRIMARY_INTERACTION): ActiveMethod.PRIMARY_WIDGET,
    (ActiveMethod.ALTERNATIVE_WALLET, SelectionEvent.PRIMARY_INTERACTION): ActiveMethod.PRIMARY_WIDGET,
    (ActiveMethod.PRIMARY_WIDGET, SelectionEvent.RESET): ActiveMethod.PRIMARY_WIDGET,
    (ActiveMethod.ALTERNATIVE_WALLET, SelectionEvent.RESET): ActiveMethod.PRIMARY_WIDGET,
}

_VIEWS: Dict[ActiveMethod, SelectionView] = {
    ActiveMethod.PRIMARY_WIDGET: SelectionView(
        alternative_selected=False, primary_dimmed=False, primary_interactive=True, wallet_button_visible=False,
    ),
    ActiveMethod.ALTERNATIVE_WALLET: SelectionView(
        alternative_selected=True, primary_dimmed=True, primary_interactive=False, wallet_button_visible=True,
    ),
}

SelectionListener = Callable[[SelectionView], None]


class MethodSelector:
    def __init__(self):
        self._active = INITIAL_METHOD
        self._listeners: List[SelectionListener] = []

    @property
    def active_method(self) -> ActiveMethod:
        return self._active

    @property
    def view(self) -> SelectionView:
        return _VIEWS[self._active]

    @property
    def is_alternative_selected(self) -> bool:
        return self._active is ActiveMethod.ALTERNATIVE_WALLET

    def subscribe(self, listener: SelectionListener) -> Callable[[], None]:
        """Enregistre un listener notifié à chaque changement d'état; retourne la désinscription."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)
        return _unsubscribe

    def select_alternative(self, *_args) -> ActiveMethod:
        return self._dispatch(SelectionEvent.SELECT_ALTERNATIVE)

    def select_primary(self, *_args) -> ActiveMethod:
        return self._dispatch(SelectionEvent.PRIMARY_INTERACTION)

    # Toute interaction avec le widget principal (change, clic) le resélectionne
    on_primary_interaction = select_primary

    def reset(self) -> ActiveMethod:
        return self._dispatch(SelectionEvent.RESET)

    def _dispatch(self, event: SelectionEvent) -> ActiveMethod:
        previous = self._active
        self._active = _TRANSITIONS[(previous, event)]
        if self._active is not previous:
            logger.debug("checkout.selector %s -> %s (%s)", previous.value, self._active.value, event.value)
            view = self.view
            for listener in list(self._listeners):
                listener(view)
        return self._active
