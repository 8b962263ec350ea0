# Delivery services
