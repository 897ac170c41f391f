from zope.interface import Interface


class IWebShim(Interface):
    pass


class ISigner(Interface):
    pass


class IStateTokenIssuer(Interface):
    pass


class ITokenExchangeClient(Interface):
    pass


class IResourceProxy(Interface):
    pass
