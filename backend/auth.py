from fastapi import Header, HTTPException, Request, status

from security import verify_webhook_hmac


async def verify_shopify_webhook(
    request: Request,
    x_shopify_hmac_sha256: str | None = Header(default=None),
) -> bytes:
    body = await request.body()
    secret = request.app.state.settings.shopify_webhook_secret
    if not secret:
        return body
    if not verify_webhook_hmac(secret, body, x_shopify_hmac_sha256):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid webhook signature"
        )
    return body
