"""Django applications of the Marina CRM backend."""
