from storefront.auth_utils import create_access_token
from storefront.config import Settings


def auth(token):
    return {"auth-token": token}


def test_fresh_cart_has_300_zero_slots(client, signup):
    token = signup()
    cart = client.post("/getcart", headers=auth(token)).json()
    assert len(cart) == 300
    assert set(cart) == {str(i) for i in range(300)}
    assert all(count == 0 for count in cart.values())


def test_add_to_cart_scenario(client, signup):
    token = signup(name="A", email="a@x.com", password="p")

    response = client.post("/addtocart", json={"itemId": 5}, headers=auth(token))
    assert response.status_code == 200
    assert response.text == "Added to cart"

    cart = client.post("/getcart", headers=auth(token)).json()
    assert cart["5"] == 1
    assert sum(cart.values()) == 1


def test_add_then_remove_restores_count(client, signup):
    token = signup()
    client.post("/addtocart", json={"itemId": 7}, headers=auth(token))
    client.post("/addtocart", json={"itemId": 7}, headers=auth(token))
    before = client.post("/getcart", headers=auth(token)).json()["7"]

    client.post("/addtocart", json={"itemId": 7}, headers=auth(token))
    response = client.post("/removefromcart", json={"itemId": 7}, headers=auth(token))
    assert response.text == "Removed from cart"

    assert client.post("/getcart", headers=auth(token)).json()["7"] == before == 2


def test_remove_never_goes_negative(client, signup):
    token = signup()
    client.post("/removefromcart", json={"itemId": 3}, headers=auth(token))
    client.post("/removefromcart", json={"itemId": 3}, headers=auth(token))
    assert client.post("/getcart", headers=auth(token)).json()["3"] == 0


def test_out_of_range_index_is_stored_as_new_key(client, signup):
    token = signup()
    client.post("/addtocart", json={"itemId": 1000}, headers=auth(token))
    cart = client.post("/getcart", headers=auth(token)).json()
    assert cart["1000"] == 1
    assert len(cart) == 301


def test_carts_are_per_user(client, signup):
    first = signup(email="one@x.com")
    second = signup(email="two@x.com")
    client.post("/addtocart", json={"itemId": 1}, headers=auth(first))
    assert client.post("/getcart", headers=auth(second)).json()["1"] == 0


def test_missing_token_is_rejected(client):
    for path, body in (("/addtocart", {"itemId": 1}), ("/removefromcart", {"itemId": 1}), ("/getcart", None)):
        response = client.post(path, json=body)
        assert response.status_code == 401
        assert response.json()["errors"] == "Please authenticate"


def test_malformed_token_is_rejected(client):
    response = client.post("/getcart", headers=auth("not-a-jwt"))
    assert response.status_code == 401
    assert response.json()["errors"] == "Invalid token"


def test_token_signed_with_other_secret_is_rejected(client):
    token = create_access_token(1, Settings(jwt_secret="someone-else"))
    response = client.post("/getcart", headers=auth(token))
    assert response.status_code == 401
    assert response.json()["errors"] == "Invalid token"


def test_expired_token_is_rejected(client, settings):
    expired = Settings(jwt_secret=settings.jwt_secret, token_expire_minutes=-1)
    response = client.post("/getcart", headers=auth(create_access_token(1, expired)))
    assert response.status_code == 401
    assert response.json()["errors"] == "Invalid token"


def test_cart_of_unknown_user_is_not_found(client, settings):
    token = create_access_token(999, settings)
    response = client.post("/getcart", headers=auth(token))
    assert response.status_code == 404
    assert response.json() == {"success": False, "errors": "User not found"}
