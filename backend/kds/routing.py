from django.urls import re_path
from . import consumers

websocket_urlpatterns = [
    re_path(r'ws/kitchen/$', consumers.KitchenDisplayConsumer.as_asgi()),
    re_path(r'ws/kitchen/table/(?P<table_no>\d+)/$', consumers.KitchenDisplayConsumer.as_asgi()),
]
