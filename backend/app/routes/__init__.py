# Routes package init
"""
EstateHub Backend — API Routes Package
========================================

Route Inventory:
    - residency.py:  POST /residency/create
                     GET  /residency/allresd
                     GET  /residency/{id}
    - user.py:       POST /user/register
                     POST /user/bookVisit/{id}
                     POST /user/allBookings
                     POST /user/removeBooking/{id}
                     POST /user/toFav/{rid}
                     POST /user/allFav
    - health.py:     GET  /health

Routes stay thin: parse the request, call a service, shape the response.
"""
