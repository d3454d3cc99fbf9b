from mangum import Mangum
from main import app

# HTTP API only; API Gateway does not carry the /ws/chat WebSocket through Mangum
handler = Mangum(app, lifespan="off")


def lambda_handler(event, context):
    return handler(event, context)
