#!/usr/bin/env python3
"""
JavaScript export of an encoded catalog.

Produces an expression `(decoder)("stream")` that evaluates to the catalog
object in a browser, so a built page can embed the compact stream together
with a small decoder instead of the full JSON.

Minified decoder names:
    a = addString       m = stringMap       X = currentLocale
    r = readString      x = locales         S = currentStringValue
    f = fromCharCode    s = stack           e = fallbackStringValue
    k = stringKey       t = localeSet       b = bits
    j = index           c = code            d = char
    p = codePoint       q = string/result   y = encodedString
"""

import json

from .catalog import FALLBACK_LOCALE, Catalog
from .encoder import CatalogEncoder

FALLBACK_PLACEHOLDER = "__FALLBACK__"

SMALL_DECODER = (
    "y=>{let m={};let x=[];let s=[];let X=null;let S=null;let e=null;let t=new Set();let k=null;"
    "let f=String.fromCharCode;let A=f(1);let B=f(2);let C=f(3);let D=f(4);let E=f(5);let F=f(6);"
    "let G=f(7);let H=f(8);let I=f(9);let J=f(0xA);let K=f(0xB);let L=f(0xC);let M=f(0xD);"
    "let N=f(0xE);let O=f(0xF);"
    "let a=q=>{S=q;m[X][k]=q;if(X==__FALLBACK__){e=q;}t.add(X);};"
    "let j=0;let b=y.split(/(?:)/u);"
    "let r=()=>{let q='';while(j<b.length){let d=b[j];let p=d.codePointAt(0);"
    "if(p>0x10){q+=d;j++;}else if(p==0x10){q+=b[j+1];j+=2;}else{break;}}return q;};"
    "while(j<b.length){let c=b[j++];"
    "if(c==A){s.push(r());}else if(c==B){s.push(r()+'/');}else if(c==C){s.push(r()+'.');}"
    "else if(c==D){s.pop();}else if(c==E){s.pop();s.push(r());}"
    "else if(c==F){s.pop();s.push(r()+'/');}else if(c==G){s.pop();s.push(r()+'.');}"
    "else if(c==H){X=r();}else if(c==I){t.clear();e=null;k=s.join('');}"
    "else if(c==J){for(let i=0;i<x.length;i++){let l=x[i];if(!t.has(l)){m[l][k]=e;}}}"
    "else if(c==K){a(r());}else if(c==L){a(`\\u202a${r()}\\u202c`);}"
    "else if(c==M){a(`\\u202b${r()}\\u202c`);}else if(c==N){a(S);}"
    "else if(c==O){let l=r();m[l]={};x.push(l);}}return m;}"
)


def to_js_string_literal(text: str) -> str:
    """
    Quote text as a JavaScript string literal.

    JSON escapes the control characters; U+2028 and U+2029 are valid in JSON
    strings but end a line in older JavaScript engines.
    """
    literal = json.dumps(text, ensure_ascii=False)
    return literal.replace("\u2028", "\\u2028").replace("\u2029", "\\u2029")


def small_decoder(fallback_locale: str = FALLBACK_LOCALE) -> str:
    """Source of the minified decoder for the given fallback locale."""
    return SMALL_DECODER.replace(FALLBACK_PLACEHOLDER, to_js_string_literal(fallback_locale))


def encode_catalog_to_js(catalog: Catalog, encoder: CatalogEncoder = None) -> str:
    """
    Encode a catalog as a self-decoding JavaScript expression.

    Args:
        catalog: Map of locale -> string key -> text
        encoder: Encoder to use (a default CatalogEncoder if not provided)

    Returns:
        JavaScript expression evaluating to the catalog
    """
    encoder = encoder or CatalogEncoder()
    stream = encoder.encode(catalog)
    return f"({small_decoder(encoder.fallback_locale)})({to_js_string_literal(stream)})"
