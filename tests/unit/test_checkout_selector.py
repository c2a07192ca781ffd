from payconnect.checkout.models import ActiveMethod
from payconnect.checkout.selector import MethodSelector, SelectionView


def test_initial_state_is_primary_widget():
    selector = MethodSelector()
    assert selector.active_method is ActiveMethod.PRIMARY_WIDGET
    assert selector.view.primary_interactive is True
    assert selector.view.wallet_button_visible is False


def test_select_alternative_dims_primary():
    selector = MethodSelector()
    selector.select_alternative()

    assert selector.active_method is ActiveMethod.ALTERNATIVE_WALLET
    assert selector.view == SelectionView(
        alternative_selected=True, primary_dimmed=True, primary_interactive=False, wallet_button_visible=True,
    )


def test_primary_interaction_returns_to_primary_and_reenables_it():
    selector = MethodSelector()
    selector.select_alternative()
    selector.on_primary_interaction({"complete": False})

    assert selector.active_method is ActiveMethod.PRIMARY_WIDGET
    assert selector.view.primary_interactive is True
    assert selector.view.primary_dimmed is False
    assert selector.view.wallet_button_visible is False
    assert selector.view.alternative_selected is False


def test_listeners_notified_only_on_change():
    selector = MethodSelector()
    views = []
    unsubscribe = selector.subscribe(views.append)

    selector.on_primary_interaction()
    selector.select_alternative()
    selector.select_alternative()
    selector.on_primary_interaction()
    assert [v.alternative_selected for v in views] == [True, False]

    unsubscribe()
    selector.select_alternative()
    assert len(views) == 2


def test_reset_goes_back_to_primary():
    selector = MethodSelector()
    selector.select_alternative()
    assert selector.reset() is ActiveMethod.PRIMARY_WIDGET
    assert selector.is_alternative_selected is False
