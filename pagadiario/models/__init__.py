# Automatically load all models so metadata knows them
from pagadiario.models.profile_model import Profile
from pagadiario.models.client_model import Client
from pagadiario.models.debt_model import Debt
from pagadiario.models.payment_schedule_model import PaymentSchedule
from pagadiario.models.route_model import Route, RouteAssignment
from pagadiario.models.payment_model import Payment
